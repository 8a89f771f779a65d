"""
Logging for the finance tracker service.

Everything the service logs goes through the ``finance_tracker`` logger tree;
modules get a child logger from ``get_logger(__name__)``. Passwords and raw
session tokens are never passed to a logger.
"""
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from finance_tracker import config

APP_LOGGER_NAME = "finance_tracker"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that log on this service's request and migration paths
THIRD_PARTY_LOGGERS = (
    "sqlalchemy.engine",
    "alembic",
    "uvicorn.error",
    "uvicorn.access",
)


def _level(name: str, default: int) -> int:
    return getattr(logging, str(name).upper(), default)


def _file_handler(log_file: str, formatter: logging.Formatter, level: int) -> logging.Handler:
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=config.LOG_FILE_MAX_BYTES,
        backupCount=config.LOG_FILE_BACKUP_COUNT,
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    app_log_level: Optional[str] = None,
    third_party_log_level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the service logger. Arguments override the values from ``config``.

    Safe to call more than once (app reloads, test clients, scripts): existing
    handlers are replaced rather than stacked.
    """
    app_level = _level(app_log_level or config.APP_LOG_LEVEL, logging.INFO)
    third_party_level = _level(third_party_log_level or config.THIRD_PARTY_LOG_LEVEL, logging.WARNING)
    log_file = log_file or config.LOG_FILE

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(app_level)
    console.setFormatter(formatter)

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    app_logger.setLevel(app_level)
    app_logger.addHandler(console)
    if log_file:
        app_logger.addHandler(_file_handler(log_file, formatter, app_level))
    app_logger.propagate = False

    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    return app_logger


def get_logger(name: str = APP_LOGGER_NAME) -> logging.Logger:
    """Child of the service logger; module names outside the package are prefixed."""
    if name == APP_LOGGER_NAME or name.startswith(f"{APP_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{APP_LOGGER_NAME}.{name}")
