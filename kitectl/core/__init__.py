"""Core lifecycle logic."""
