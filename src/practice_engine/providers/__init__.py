"""Pluggable per-language providers and their registry."""
