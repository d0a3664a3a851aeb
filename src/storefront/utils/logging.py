"""Logging for the storefront service.

Records flow through the standard library root logger; structlog shapes them.
Production and staging get one JSON object per line, every other environment
gets the coloured console renderer. Request-scoped values bound with
``bind_request_context`` appear on every line logged while serving that request.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

import structlog

LEVELS_BY_ENVIRONMENT = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

JSON_ENVIRONMENTS = ("production", "staging")

# Chatty third-party loggers held at WARNING regardless of LOG_LEVEL
QUIET_LOGGERS = ("protean", "urllib3", "sqlalchemy.engine", "asyncio")

_MAX_LOG_BYTES = 10 * 1024 * 1024


def current_environment() -> str:
    return (os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """``LOG_LEVEL`` if set, else the default for the current environment."""
    return os.getenv("LOG_LEVEL", LEVELS_BY_ENVIRONMENT.get(current_environment(), "INFO")).upper()


def _rotating_file(path: Path, level: int | str) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=_MAX_LOG_BYTES,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def _handlers(level: str, log_dir: Path | None) -> list[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    handlers = [console]

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(_rotating_file(log_dir / "storefront.log", level))
        handlers.append(_rotating_file(log_dir / "storefront_error.log", logging.ERROR))
    return handlers


def _renderers(environment: str) -> list:
    if environment in JSON_ENVIRONMENTS:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    # ConsoleRenderer formats exc_info itself through rich
    return [structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=4),
    )]


def configure_logging(log_dir: str | Path | None = None) -> None:
    """Install handlers on the root logger and configure structlog.

    Log files are only written when ``log_dir`` or ``LOG_DIR`` names a directory.
    """
    level = get_log_level()
    log_dir = log_dir or os.getenv("LOG_DIR")

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = _handlers(level, Path(log_dir) if log_dir else None)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            *_renderers(current_environment()),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_request_context(request_id: str, customer_id: str | None = None) -> None:
    """Start a fresh logging context for one request."""
    structlog.contextvars.clear_contextvars()
    context = {"request_id": request_id}
    if customer_id:
        context["customer_id"] = customer_id
    structlog.contextvars.bind_contextvars(**context)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
