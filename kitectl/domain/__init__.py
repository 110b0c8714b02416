"""Domain models for the daemon lifecycle."""
