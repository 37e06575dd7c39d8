"""Настройка логирования."""

import logging
import logging.config

from app.core.config import settings

_configured = False


def setup_logging(level: str | None = None) -> None:
    """Настроить корневой логгер (повторный вызов ничего не делает)."""
    global _configured
    if _configured:
        return

    level = (level or settings.LOG_LEVEL).upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": settings.LOG_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {"level": level, "handlers": ["console"]},
            "loggers": {
                "sqlalchemy.engine": {
                    "level": "INFO" if settings.DATABASE_ECHO else "WARNING",
                },
            },
        }
    )
    _configured = True
