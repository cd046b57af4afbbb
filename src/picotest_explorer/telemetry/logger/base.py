# src/picotest_explorer/telemetry/logger/base.py

"""
structlog configuration: console output on stderr plus an optional JSON log file.
"""

import logging
import sys

import structlog
from structlog.typing import FilteringBoundLogger

from picotest_explorer.telemetry.logger.processors import (
    add_emoji_processor,
    remove_extra_keys_processor,
)

BASE_LOGGER_NAME = "picotest_explorer"

StructLogger = FilteringBoundLogger


def _console_renderer(json_logs: bool) -> structlog.types.Processor:
    if json_logs:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def _replace_root_handlers(level: int) -> logging.Logger:
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)
    root_logger.setLevel(level)
    return root_logger


def setup_logging(
    level: int = logging.INFO,
    json_logs: bool = False,
    log_file: str | None = None,
    file_only: bool = False,
) -> None:
    """
    Routes structlog through the standard library and (re)installs the handlers.

    Console logs go to stderr so that stdout stays free for test output.
    Calling it again replaces the previous handlers.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            add_emoji_processor,
            remove_extra_keys_processor,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = _replace_root_handlers(level)
    slog = structlog.get_logger(BASE_LOGGER_NAME)

    if not file_only:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=_console_renderer(json_logs)))
        root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            slog.error("Cannot open log file", log_file=log_file, error=str(e))
        else:
            file_handler.setFormatter(
                structlog.stdlib.ProcessorFormatter(processor=structlog.processors.JSONRenderer(sort_keys=True))
            )
            file_handler.setLevel(level)
            root_logger.addHandler(file_handler)

    slog.debug(
        "Logging configured",
        log_level=logging.getLevelName(level),
        json_console=json_logs,
        console=not file_only,
        log_file=log_file,
    )

# 🔼⚙️
