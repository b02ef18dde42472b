"""
Structured Logging.

Every module logs through ``get_logger(__name__)``. ``setup_logging`` wires
structlog onto the standard library root logger using the ``logging``
section of the application config (config/settings/logging.yaml).

JSON records carry timestamp, level, logger, event, func_name and lineno,
plus any fields passed by the caller. The rotating file handler always
writes JSON lines, whatever the console format.

Usage:
    from noteflow.core.logging import get_logger, setup_logging

    setup_logging()
    logger = get_logger(__name__)
    logger.info("Note created", extra={"note_id": note.id})
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.typing import Processor

from noteflow.core.config import find_project_root, get_app_config
from noteflow.core.config_schema import FileHandlerSchema, LoggingSchema

VALID_SOURCES = frozenset({"cli", "internal", "tests", "unknown"})

# Third-party loggers held at WARNING regardless of the configured level
_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


def _load_logging_config() -> LoggingSchema:
    return get_app_config().logging


def _resolve_log_path(configured_path: str) -> Path:
    """Relative log paths are taken from the project root."""
    path = Path(configured_path).expanduser()
    return path if path.is_absolute() else find_project_root() / path


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def _file_handler(config: FileHandlerSchema, formatter: logging.Formatter) -> RotatingFileHandler:
    log_path = _resolve_log_path(config.path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        filename=str(log_path),
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure structlog and the root logger.

    Arguments left as None fall back to the logging config.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        format_type: 'console' for human-readable output, 'json' otherwise
        enable_console: Write records to stderr
        enable_file_logging: Write JSON lines to the configured file
    """
    config = _load_logging_config()
    level = level or config.level
    format_type = format_type or config.format
    if enable_console is None:
        enable_console = config.handlers.console.enabled
    if enable_file_logging is None:
        enable_file_logging = config.handlers.file.enabled

    processors = _shared_processors()
    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=processors,
    )
    if format_type == "console":
        console_formatter = structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
            foreign_pre_chain=processors,
        )
    else:
        console_formatter = json_formatter

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

    if enable_file_logging:
        root_logger.addHandler(_file_handler(config.handlers.file, json_formatter))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """Get a structlog logger, typically for ``__name__``."""
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log ``message`` tagged with the part of the system it came from.

    Sources outside VALID_SOURCES are recorded as ``unknown``.

    Raises:
        AttributeError: If level is not a log method of ``logger``
    """
    if source not in VALID_SOURCES:
        source = "unknown"
    getattr(logger, level.lower())(message, source=source, **kwargs)
