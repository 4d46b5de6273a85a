"""Shared helpers (output formatting)."""
