"""Core checking pipeline."""
