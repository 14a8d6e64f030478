"""Data models shared across the engine."""
