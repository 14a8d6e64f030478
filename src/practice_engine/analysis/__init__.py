"""Mistake classification and pattern analysis."""
