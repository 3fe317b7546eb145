"""API routes for the notesync reference server."""
