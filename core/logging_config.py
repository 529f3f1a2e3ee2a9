"""Logging configuration helpers."""

from __future__ import annotations

import logging
from typing import Optional

from flask import current_app, has_app_context


_APPDB_HANDLER_ATTR = "_is_appdb_log_handler"


def _create_appdb_db_handler() -> logging.Handler:
    """Create a DBLogHandler configured for appdb logging."""

    from core.db_log_handler import DBLogHandler

    app_obj = current_app._get_current_object() if has_app_context() else None
    handler = DBLogHandler(app=app_obj)
    handler.setLevel(logging.INFO)
    setattr(handler, _APPDB_HANDLER_ATTR, True)
    return handler


def ensure_appdb_logging(logger: logging.Logger) -> None:
    """Attach the database-backed appdb log handler to *logger* if missing."""

    from core.db_log_handler import DBLogHandler

    for handler in logger.handlers:
        if getattr(handler, _APPDB_HANDLER_ATTR, False):
            break
        if isinstance(handler, DBLogHandler):
            setattr(handler, _APPDB_HANDLER_ATTR, True)
            break
    else:
        logger.addHandler(_create_appdb_db_handler())

    if logger.level == logging.NOTSET:
        logger.setLevel(logging.INFO)


def get_feature_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the logger used by feature modules.

    Inside an application context the Flask app logger is returned so that
    records reach the handlers configured by :func:`webapp.create_app`.
    """

    if has_app_context():
        return current_app.logger
    return logging.getLogger(name or "app")


def log_event_error(logger: logging.Logger, message: str, event: str, exc_info: bool = True, **extra_attrs):
    """Log an error with an event identifier for database storage.

    Args:
        logger: Logger instance to use.
        message: Error message.
        event: Event identifier for categorization.
        exc_info: Whether to include exception information.
        **extra_attrs: Additional attributes to include in log record.
    """
    extra = {
        "event": event,
        **extra_attrs,
    }

    logger.error(message, exc_info=exc_info, extra=extra)


def log_event_warning(logger: logging.Logger, message: str, event: str, **extra_attrs):
    extra = {
        "event": event,
        **extra_attrs,
    }

    logger.warning(message, extra=extra)


def log_event_info(logger: logging.Logger, message: str, event: str, **extra_attrs):
    """Log info with an event identifier for database storage.

    Args:
        logger: Logger instance to use.
        message: Info message.
        event: Event identifier for categorization.
        **extra_attrs: Additional attributes to include in log record.
    """
    extra = {
        "event": event,
        **extra_attrs,
    }

    logger.info(message, extra=extra)


__all__ = [
    "ensure_appdb_logging",
    "get_feature_logger",
    "log_event_error",
    "log_event_info",
    "log_event_warning",
]
