"""SQLAlchemy tables backing the SQL remote store."""
