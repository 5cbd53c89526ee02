"""CLI layer for cantina application."""
