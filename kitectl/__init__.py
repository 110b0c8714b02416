"""kitectl - lifecycle control for the Kite background daemon."""
