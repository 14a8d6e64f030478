"""German language provider."""

from practice_engine.providers.german.provider import GermanLanguageProvider

__all__ = ["GermanLanguageProvider"]
