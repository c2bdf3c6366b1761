"""Persisting crosscheck results to the database."""
