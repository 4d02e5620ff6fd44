"""Local cache and media storage."""
