"""Настройка loguru: единый вывод для приложения и логгеров uvicorn."""

from __future__ import annotations

import logging
import sys

from loguru import logger

_STDLIB_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi")


class _InterceptHandler(logging.Handler):
    """Перенаправляет записи stdlib logging в loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(json: bool = False, level: str = "INFO") -> None:
    logger.remove()
    logger.add(
        sys.stdout,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name} | {message}",
        level=level.upper(),
        colorize=not json,
        serialize=json,
        backtrace=False,
        enqueue=True,
    )
    handler = _InterceptHandler()
    for name in _STDLIB_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [handler]
        std_logger.propagate = False


__all__ = ["setup_logging"]
