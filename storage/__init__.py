"""Persistence layer: SQLite session records and recording files."""
