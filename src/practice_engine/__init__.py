"""Adaptive practice engine for primary-school language and arithmetic learning."""

__version__ = "0.1.0"
