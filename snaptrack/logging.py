"""Logging setup — structlog поверх stdlib root handler.

Библиотека не конфигурирует логирование при импорте: вызывающее
приложение вызывает setup_logging() один раз при старте.
"""

import logging
import os
import sys
from typing import Final, TextIO

import structlog

LOG_LEVEL_ENV: Final[str] = "SNAPTRACK_LOG_LEVEL"
LOG_LEVEL_DEFAULT: Final[str] = "INFO"


def resolve_log_level(level: str | int | None = None) -> int:
    """Уровень логирования: аргумент → SNAPTRACK_LOG_LEVEL → INFO."""
    if isinstance(level, int):
        return level
    level_name = (level or os.getenv(LOG_LEVEL_ENV, LOG_LEVEL_DEFAULT)).upper()
    resolved = logging.getLevelName(level_name)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(
    level: str | int | None = None,
    json: bool = True,
    stream: TextIO | None = None,
) -> None:
    """
    Конфигурация structlog и stdlib root logger.

    Args:
        level: Уровень (имя или число); по умолчанию из SNAPTRACK_LOG_LEVEL
        json: JSONRenderer (True) или ConsoleRenderer (False)
        stream: Поток вывода (stdout по умолчанию)
    """
    log_level = resolve_log_level(level)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(log_level)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)

    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=False,
    )
