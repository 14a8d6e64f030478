"""End-to-end practice flows composed from the engine components."""
