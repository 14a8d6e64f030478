"""structlog configuration shared by every engine component."""

import logging
import os

import structlog

from practice_engine.config import get_settings


def configure_logging(json: bool | None = None, level: str | None = None) -> None:
    """Configure structlog for the engine.

    Production (``ENV=production`` or ``log_json``) renders JSON for machine
    parsing; otherwise a console renderer is used.

    Args:
        json: Force JSON output. Defaults to the environment/settings value.
        level: Minimum log level name. Defaults to ``Settings.log_level``.
    """
    settings = get_settings()
    is_production = os.getenv("ENV", "development").lower() == "production"
    if json is None:
        json = is_production or settings.log_json
    level_name = (level or settings.log_level).upper()
    min_level = logging.getLevelNamesMapping().get(level_name, logging.INFO)

    if json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
