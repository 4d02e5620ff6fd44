"""Record mutation services."""
