"""Remote and local reconciliation."""
