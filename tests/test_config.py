"""Tests for settings loading."""

from practice_engine.config import Settings, YamlSettingsSource, get_settings


def test_yaml_source_flattens_sections(tmp_path):
    """Nested YAML sections map onto flat Settings field names."""
    path = tmp_path / "settings.yaml"
    path.write_text(
        "scheduler:\n"
        "  maximum_interval: 180\n"
        "hints:\n"
        "  level1_threshold: 2\n"
        "math:\n"
        "  zehneruebergang_ratio: 0.5\n"
        "unknown:\n"
        "  value: 1\n",
        encoding="utf-8",
    )

    values = YamlSettingsSource(Settings, yaml_path=path)()

    assert values == {
        "maximum_interval": 180,
        "hint_level1_threshold": 2,
        "math_zehneruebergang_ratio": 0.5,
    }


def test_yaml_source_missing_file(tmp_path):
    """A missing settings file contributes nothing."""
    assert YamlSettingsSource(Settings, yaml_path=tmp_path / "absent.yaml")() == {}


def test_yaml_source_empty_file(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("", encoding="utf-8")
    assert YamlSettingsSource(Settings, yaml_path=path)() == {}


def test_defaults_match_shipped_yaml():
    settings = Settings()
    assert settings.default_language == "de"
    assert settings.minimum_interval == 1
    assert settings.maximum_interval == 365
    assert settings.typing_base_xp == 50
    assert settings.hint_level3_threshold == 7
    assert settings.math_problem_count == 10


def test_env_overrides_yaml(monkeypatch):
    """PRACTICE_* environment variables win over settings.yaml."""
    monkeypatch.setenv("PRACTICE_MAXIMUM_INTERVAL", "90")
    monkeypatch.setenv("PRACTICE_TYPING_ADVANCE_ON_ERROR", "true")

    settings = Settings()

    assert settings.maximum_interval == 90
    assert settings.typing_advance_on_error is True


def test_init_arguments_win(monkeypatch):
    monkeypatch.setenv("PRACTICE_REVIEW_LIMIT", "25")
    assert Settings(review_limit=3).review_limit == 3


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_config_dir_under_project_root():
    settings = Settings()
    assert settings.config_dir == settings.project_root / "config"
    assert (settings.config_dir / "settings.yaml").exists()
