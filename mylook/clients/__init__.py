"""HTTP clients for external providers."""
