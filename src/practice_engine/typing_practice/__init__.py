"""Character-level typing practice."""
