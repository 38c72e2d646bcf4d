"""Structured logging for the portfolio profile package.

Modules log through ``get_logger(__name__)`` with snake_case event names
and keyword context. ``setup_logging()`` routes those events through
stdlib logging, attaching handlers to the ``portfolio_profile`` logger
only and leaving the root logger to the host application.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import IO

import structlog

from portfolio_profile.config import Settings, get_settings

PACKAGE_LOGGER = "portfolio_profile"

# Marks handlers installed here so a repeated setup replaces them
_HANDLER_FLAG = "_portfolio_profile_handler"

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _formatter(renderer: structlog.types.Processor) -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def _file_handler(settings: Settings) -> logging.Handler | None:
    try:
        Path(settings.log_directory).mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            filename=settings.log_file_path,
            maxBytes=settings.log_file_max_bytes,
            backupCount=settings.log_file_backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        print(f"Warning: Could not set up profile log file: {e}", file=sys.stderr)
        return None


def setup_logging(
    settings: Settings | None = None, stream: IO[str] | None = None
) -> logging.Logger:
    """Route this package's log events to the console and, optionally, a file.

    Console output is rendered for humans when ``settings.is_development``
    and as JSON lines otherwise. The file, when enabled, is always JSON.

    Args:
        settings: Settings to use. Defaults to the cached application settings.
        stream: Console stream. Defaults to stdout.

    Returns:
        The configured package logger.
    """
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            package_logger.removeHandler(handler)
            handler.close()

    console_renderer: structlog.types.Processor = (
        structlog.dev.ConsoleRenderer(colors=False)
        if settings.is_development
        else structlog.processors.JSONRenderer()
    )
    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stdout)]
    handlers[0].setFormatter(_formatter(console_renderer))

    if settings.log_to_file:
        file_handler = _file_handler(settings)
        if file_handler is not None:
            file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
            handlers.append(file_handler)

    for handler in handlers:
        setattr(handler, _HANDLER_FLAG, True)
        handler.setLevel(level)
        package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False

    # Request lines from the HTTP stack duplicate profile_fetch_* events
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return package_logger


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]
