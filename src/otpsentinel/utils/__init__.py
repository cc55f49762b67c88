"""Shared helpers: typed errors, duration strings and logging."""
