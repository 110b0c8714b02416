"""HTTP client adapters."""
