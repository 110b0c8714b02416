"""Process runner adapters."""
