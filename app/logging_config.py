"""Logging setup for the physique coach service.

Everything goes to the console and ``app.log``. The recovery path (locator,
repair ladder, pipeline, normalizers) additionally writes to ``recovery.log``
at its own level so failing provider responses can be traced without
turning the whole service up to DEBUG.
"""
from __future__ import annotations

import logging
from logging.config import dictConfig
from pathlib import Path

from pydantic import ValidationError

from app.config import get_settings

RECOVERY_LOGGERS = (
    "app.services.payload_locator",
    "app.services.json_repair",
    "app.services.recovery_pipeline",
    "app.normalizers",
)

_configured = False


def _default_config(log_dir: Path, level: str, recovery_level: str) -> dict:
    fmt = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    loggers: dict[str, dict] = {
        "httpx": {"level": "WARNING"},
        "anthropic": {"level": "WARNING"},
    }
    for name in RECOVERY_LOGGERS:
        loggers[name] = {"level": recovery_level, "handlers": ["recovery_file"]}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": fmt,
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
            },
            "file": {
                "class": "logging.FileHandler",
                "filename": str(log_dir / "app.log"),
                "encoding": "utf-8",
                "formatter": "standard",
            },
            "recovery_file": {
                "class": "logging.FileHandler",
                "filename": str(log_dir / "recovery.log"),
                "encoding": "utf-8",
                "formatter": "standard",
            },
        },
        "loggers": loggers,
        "root": {
            "level": level,
            "handlers": ["console", "file"],
        },
    }


def configure_logging() -> None:
    """Configure application logging once per process."""

    global _configured
    if _configured:
        return

    try:
        settings = get_settings()
        log_dir = settings.log_dir
        level = settings.log_level
        recovery_level = settings.recovery_log_level
    except ValidationError:
        # Provider credentials may be missing (CLI use, early test imports)
        log_dir = Path("logs")
        level = recovery_level = "INFO"
    log_dir.mkdir(parents=True, exist_ok=True)

    dictConfig(_default_config(log_dir, level, recovery_level))
    logging.getLogger(__name__).debug(
        "Logging configured | level=%s recovery_level=%s dir=%s", level, recovery_level, log_dir
    )
    _configured = True
