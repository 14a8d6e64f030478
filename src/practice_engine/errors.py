"""Exceptions raised by the practice engine.

Only configuration problems raise. Insufficient data yields neutral values and
shortfalls yield partial results.
"""


class PracticeEngineError(Exception):
    """Base exception for all engine errors."""


class ProviderError(PracticeEngineError):
    """Base exception for language provider problems."""


class ProviderNotRegisteredError(ProviderError):
    """Raised when no provider is registered for a language code."""

    def __init__(self, language_code: str, available: list[str]):
        self.language_code = language_code
        self.available = available
        listed = ", ".join(available) if available else "none"
        super().__init__(
            f"No provider registered for language: {language_code}. "
            f"Available languages: {listed}"
        )


class ProviderLanguageMismatchError(ProviderError):
    """Raised when a provider's language code differs from its registration key."""

    def __init__(self, registered_code: str, provider_code: str):
        self.registered_code = registered_code
        self.provider_code = provider_code
        super().__init__(
            f"Language code mismatch: registering as {registered_code!r} "
            f"but provider reports {provider_code!r}"
        )


class ProviderValidationError(ProviderError):
    """Raised when a provider is missing required capabilities."""

    def __init__(self, language_code: str, problems: list[str]):
        self.language_code = language_code
        self.problems = problems
        super().__init__(
            f"Invalid provider for {language_code}: " + "; ".join(problems)
        )


class MathSessionError(PracticeEngineError):
    """Base exception for math session bookkeeping."""


class SessionCompleteError(MathSessionError):
    """Raised when an answer is recorded but the session has no current problem."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"No current problem in session {session_id}")
