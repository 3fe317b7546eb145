"""Server module - Reference notes service."""
