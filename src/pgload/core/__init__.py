"""Core bridge between PostgreSQL and the host workspace."""
