"""Tests for structlog configuration."""

import json

import structlog

from practice_engine.logging_config import configure_logging


def test_json_output(capsys):
    """JSON mode renders one parseable object per event."""
    configure_logging(json=True, level="DEBUG")
    structlog.get_logger().info("review_scheduled", word_id="w-hund", interval=6)

    line = capsys.readouterr().out.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["event"] == "review_scheduled"
    assert payload["word_id"] == "w-hund"
    assert payload["interval"] == 6
    assert payload["level"] == "info"
    assert "timestamp" in payload


def test_level_filtering(capsys):
    configure_logging(json=True, level="WARNING")
    logger = structlog.get_logger()
    logger.info("hidden_event")
    logger.warning("shown_event")

    out = capsys.readouterr().out
    assert "hidden_event" not in out
    assert "shown_event" in out


def test_console_output(capsys):
    configure_logging(json=False, level="INFO")
    structlog.get_logger().info("typing_completed", wpm=30)

    assert "typing_completed" in capsys.readouterr().out


def teardown_function():
    structlog.reset_defaults()
