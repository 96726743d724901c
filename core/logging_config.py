# core/logging_config.py
"""Configure logging sinks and formatting.

This module configures:
- A console handler (Rich when enabled, plain stream otherwise).
- An optional rotating file handler.
- Baseline log level overrides for the noisy Neo4j driver loggers.

Notes:
    This module performs side-effectful logger configuration and should be
    called once at process startup via `setup_logging()`.
"""

import logging as stdlib_logging
import logging.handlers
import os

import structlog
from rich.logging import RichHandler

import config


def setup_logging(level: str | None = None) -> None:
    """Set up logging handlers and formatting on the root logger.

    Args:
        level: Overrides `config.settings.LOG_LEVEL_STR` when given.

    Notes:
        This function replaces the root logger handler list and is intended to
        be called once during application startup.
    """
    settings = config.settings
    level = (level or settings.LOG_LEVEL_STR).upper()

    root_logger = stdlib_logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(level)

    if settings.ENABLE_RICH_LOGGING:
        console_handler: stdlib_logging.Handler = RichHandler(
            level=level,
            rich_tracebacks=True,
            show_path=False,
            markup=True,
            show_time=False,  # Timestamp already in our formatter
            show_level=False,  # Level already in our formatter
        )
        console_handler.setFormatter(config.rich_formatter)
    else:
        console_handler = stdlib_logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(config.simple_formatter)
    root_logger.addHandler(console_handler)

    if settings.LOG_FILE:
        log_path = settings.LOG_FILE
        os.makedirs(os.path.dirname(log_path) or ".", exist_ok=True)
        file_handler = stdlib_logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            mode="a",
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(config.simple_formatter)
        root_logger.addHandler(file_handler)

    stdlib_logging.getLogger("neo4j.notifications").setLevel(stdlib_logging.WARNING)
    stdlib_logging.getLogger("neo4j").setLevel(stdlib_logging.WARNING)

    structlog.get_logger(__name__).info("Logging setup complete", level=level, log_file=settings.LOG_FILE)
