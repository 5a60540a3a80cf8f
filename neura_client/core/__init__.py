"""Core utilities: HTTP client, caching, errors."""
