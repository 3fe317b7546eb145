"""Client module - Offline sync engine and CLI."""
