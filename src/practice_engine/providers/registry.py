"""Language code to provider lookup with lazy construction and validation."""

import threading
from collections.abc import Callable

import structlog
from pydantic import BaseModel, ConfigDict

from practice_engine.config import Settings, get_settings
from practice_engine.errors import (
    ProviderLanguageMismatchError,
    ProviderNotRegisteredError,
    ProviderValidationError,
)
from practice_engine.providers.base import (
    REQUIRED_CAPABILITIES,
    REQUIRED_PROPERTIES,
    LanguageProvider,
)

logger = structlog.get_logger()

ProviderFactory = Callable[[], LanguageProvider]


class ProviderResolution(BaseModel):
    """Result of a fallback-aware lookup."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    provider: LanguageProvider
    requested_code: str
    resolved_code: str
    used_fallback: bool = False


class ProviderRegistry:
    """Registry of language providers.

    Constructed explicitly and passed to consumers. Writes are serialized by a
    lock; reads of providers that are already built take no lock.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._providers: dict[str, LanguageProvider] = {}
        self._factories: dict[str, ProviderFactory] = {}
        self._lock = threading.Lock()

    def register(self, language_code: str, provider: LanguageProvider) -> None:
        """Register a ready-made provider.

        Raises:
            ProviderLanguageMismatchError: If the provider reports another code.
        """
        self._check_code(language_code, provider)
        with self._lock:
            if language_code in self._providers or language_code in self._factories:
                logger.warning("provider_overwritten", language=language_code)
            self._providers[language_code] = provider
            self._factories.pop(language_code, None)
        logger.info(
            "provider_registered",
            language=language_code,
            name=provider.language_name,
        )

    def register_factory(self, language_code: str, factory: ProviderFactory) -> None:
        """Register a constructor; the provider is built on first ``get``."""
        with self._lock:
            if language_code in self._providers or language_code in self._factories:
                logger.warning("provider_overwritten", language=language_code)
            self._providers.pop(language_code, None)
            self._factories[language_code] = factory
        logger.info("provider_factory_registered", language=language_code)

    def get(self, language_code: str) -> LanguageProvider:
        """Return the provider for ``language_code``.

        Raises:
            ProviderNotRegisteredError: If nothing is registered for the code.
        """
        provider = self._providers.get(language_code)
        if provider is not None:
            return provider

        with self._lock:
            provider = self._providers.get(language_code)
            if provider is not None:
                return provider
            factory = self._factories.get(language_code)
            if factory is None:
                raise ProviderNotRegisteredError(language_code, self._codes_unlocked())
            provider = factory()
            self._check_code(language_code, provider)
            self._providers[language_code] = provider
            del self._factories[language_code]

        logger.info("provider_constructed", language=language_code)
        return provider

    def has(self, language_code: str) -> bool:
        return language_code in self._providers or language_code in self._factories

    def get_with_fallback(
        self, language_code: str, fallback_code: str | None = None
    ) -> ProviderResolution:
        """Look up a provider, falling back to the default language.

        The substitution is logged and reported via ``used_fallback``.

        Raises:
            ProviderNotRegisteredError: If the fallback is missing too.
        """
        fallback_code = fallback_code or self.settings.fallback_language
        try:
            provider = self.get(language_code)
        except ProviderNotRegisteredError:
            logger.warning(
                "provider_fallback",
                requested=language_code,
                fallback=fallback_code,
            )
            return ProviderResolution(
                provider=self.get(fallback_code),
                requested_code=language_code,
                resolved_code=fallback_code,
                used_fallback=True,
            )
        return ProviderResolution(
            provider=provider,
            requested_code=language_code,
            resolved_code=language_code,
        )

    def supported_languages(self) -> list[str]:
        with self._lock:
            return self._codes_unlocked()

    def describe_providers(self) -> list[str]:
        """Human-readable listing; factories not yet built are marked."""
        with self._lock:
            described = {
                code: f"{code} - {provider.language_name}"
                for code, provider in self._providers.items()
            }
            for code in self._factories:
                described[code] = f"{code} (not loaded)"
        return [described[code] for code in sorted(described)]

    def unregister(self, language_code: str) -> bool:
        with self._lock:
            removed = (
                self._providers.pop(language_code, None) is not None
                or self._factories.pop(language_code, None) is not None
            )
        if removed:
            logger.info("provider_unregistered", language=language_code)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._providers.clear()
            self._factories.clear()
        logger.info("provider_registry_cleared")

    def register_and_validate(self, language_code: str, provider: LanguageProvider) -> None:
        """Register only if the provider implements every required capability.

        Raises:
            ProviderValidationError: Listing each missing attribute or method.
        """
        problems = validate_provider(provider)
        if problems:
            logger.error("provider_invalid", language=language_code, problems=problems)
            raise ProviderValidationError(language_code, problems)
        self.register(language_code, provider)

    def _codes_unlocked(self) -> list[str]:
        return sorted(set(self._providers) | set(self._factories))

    @staticmethod
    def _check_code(language_code: str, provider: LanguageProvider) -> None:
        provider_code = getattr(provider, "language_code", None)
        if provider_code != language_code:
            raise ProviderLanguageMismatchError(language_code, str(provider_code))


def validate_provider(provider: object) -> list[str]:
    """Return a list of problems; empty when the provider is complete."""
    problems = []
    for name in REQUIRED_PROPERTIES:
        if getattr(provider, name, None) is None:
            problems.append(f"Missing property: {name}")
    for name in REQUIRED_CAPABILITIES:
        if not callable(getattr(provider, name, None)):
            problems.append(f"Missing method: {name}")
    return problems


def create_default_registry(settings: Settings | None = None) -> ProviderRegistry:
    """Registry with the German provider registered lazily."""
    from practice_engine.providers.german import GermanLanguageProvider

    registry = ProviderRegistry(settings)
    registry.register_factory("de", GermanLanguageProvider)
    return registry
