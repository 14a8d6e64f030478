"""Engine configuration using pydantic-settings."""

import functools
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path(__file__).resolve().parent.parent.parent


# (yaml section, yaml key) -> Settings field
_YAML_FIELDS: dict[tuple[str, str], str] = {
    ("providers", "default_language"): "default_language",
    ("providers", "fallback_language"): "fallback_language",
    ("scheduler", "minimum_interval"): "minimum_interval",
    ("scheduler", "maximum_interval"): "maximum_interval",
    ("scheduler", "expected_response_time_ms"): "expected_response_time_ms",
    ("scheduler", "review_limit"): "review_limit",
    ("typing", "base_xp"): "typing_base_xp",
    ("typing", "advance_on_error"): "typing_advance_on_error",
    ("hints", "enabled"): "hints_enabled",
    ("hints", "level1_threshold"): "hint_level1_threshold",
    ("hints", "level2_threshold"): "hint_level2_threshold",
    ("hints", "level3_threshold"): "hint_level3_threshold",
    ("math", "default_difficulty"): "math_default_difficulty",
    ("math", "problem_count"): "math_problem_count",
    ("math", "max_generation_attempts"): "math_max_generation_attempts",
    ("math", "zehneruebergang_ratio"): "math_zehneruebergang_ratio",
    ("logging", "json"): "log_json",
    ("logging", "level"): "log_level",
}


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from settings.yaml."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_path: Path | None = None):
        super().__init__(settings_cls)
        self.yaml_path = yaml_path

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        """Load settings from YAML file."""
        yaml_path = self.yaml_path or _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested structure to match Settings field names
        flattened = {}
        for (section, key), field_name in _YAML_FIELDS.items():
            block = data.get(section)
            if isinstance(block, dict):
                flattened[field_name] = block.get(key)

        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Engine settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_prefix="PRACTICE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Language providers
    default_language: str = Field(default="de")
    fallback_language: str = Field(default="de")

    # Spaced repetition
    minimum_interval: int = Field(default=1, ge=1)
    maximum_interval: int = Field(default=365, ge=1)
    expected_response_time_ms: float = Field(default=5000.0, gt=0)
    review_limit: int = Field(default=10, ge=1)

    # Typing
    typing_base_xp: int = Field(default=50, ge=0)
    typing_advance_on_error: bool = Field(default=False)

    # Hints
    hints_enabled: bool = Field(default=True)
    hint_level1_threshold: int = Field(default=3, ge=1)
    hint_level2_threshold: int = Field(default=5, ge=1)
    hint_level3_threshold: int = Field(default=7, ge=1)

    # Math
    math_default_difficulty: str = Field(default="easy")
    math_problem_count: int = Field(default=10, ge=1)
    math_max_generation_attempts: int = Field(default=50, ge=1)
    math_zehneruebergang_ratio: float = Field(default=0.4, ge=0.0, le=1.0)

    # Logging
    log_json: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Paths
    project_root: Path = Field(default_factory=_find_project_root)

    @property
    def config_dir(self) -> Path:
        return self.project_root / "config"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include YAML file.

        Priority order (highest to lowest):
        1. init_settings (arguments passed to Settings())
        2. env_settings (PRACTICE_* environment variables)
        3. dotenv_settings (.env file)
        4. YamlSettingsSource (settings.yaml)
        5. file_secret_settings
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Get engine settings singleton."""
    return Settings()
