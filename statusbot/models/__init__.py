"""Domain and ORM models."""
