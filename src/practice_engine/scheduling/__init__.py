"""Spaced repetition scheduling."""
