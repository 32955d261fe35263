"""Document repositories."""
