"""Persist log records into the ``log`` table.

Records are written through their own connection so that a failing request
transaction never loses its log lines.
"""

import json
import logging
import sys
import traceback
from typing import TYPE_CHECKING, Any, Dict, Optional, Set

from flask import current_app, has_app_context
from sqlalchemy import create_engine, insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DataError, OperationalError

from .db import db
from .settings import settings

if TYPE_CHECKING:  # pragma: no cover
    from flask import Flask


# Attributes every LogRecord carries; anything else came in through ``extra``.
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}

# Stored in dedicated columns rather than in the JSON payload.
_COLUMN_ATTRS = frozenset({"event", "path", "request_id"})

_COLUMN_LIMITS = {
    "level": 20,
    "event": 50,
    "logger_name": 120,
    "path": 255,
    "request_id": 36,
}


def _record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRS and key not in _COLUMN_ATTRS and not key.startswith("_")
    }


def _clip(value: Optional[Any], limit: int) -> Optional[str]:
    if value is None:
        return None
    return str(value)[:limit]


def _is_private_sqlite(engine: Engine) -> bool:
    """In-memory SQLite databases are not visible from a second connection."""

    return engine.url.get_backend_name() == "sqlite" and engine.url.database in (None, "", ":memory:")


class DBLogHandler(logging.Handler):
    """Logging handler writing each record as one row of ``core.models.log.Log``.

    The engine is, in order of preference, the one passed in, the engine of the
    bound Flask app (or the current app), or one built from
    ``LOGS_DATABASE_URI``.
    """

    def __init__(self, app: Optional["Flask"] = None, *, engine: Optional[Engine] = None) -> None:
        super().__init__()
        self._app = app
        self._engine = engine
        self._prepared: Set[int] = set()

    def _app_engine(self) -> Optional[Engine]:
        if has_app_context():
            return db.engine
        if self._app is not None:
            with self._app.app_context():
                return db.engine
        return None

    def _resolve_engine(self) -> Engine:
        if self._engine is None:
            engine = self._app_engine()
            if engine is None or _is_private_sqlite(engine):
                engine = create_engine(settings.logs_database_uri)
            self._engine = engine
        return self._engine

    def _ensure_table(self, engine: Engine) -> None:
        if id(engine) in self._prepared:
            return
        from .models.log import Log

        Log.__table__.create(bind=engine, checkfirst=True)
        self._prepared.add(id(engine))

    def build_values(self, record: logging.LogRecord) -> Dict[str, Any]:
        """Map *record* to column values.

        JSON object messages are stored as-is; anything else is wrapped in
        ``{"message": ...}``. Call-site details go under ``_meta`` and
        ``extra`` attributes under ``_extra``.
        """

        text = record.getMessage()
        try:
            payload = json.loads(text)
        except ValueError:
            payload = {"message": text}
        if not isinstance(payload, dict):
            payload = {"message": payload}

        payload.setdefault("_meta", {}).update(
            module=record.module,
            function=record.funcName,
            line=record.lineno,
        )
        extras = _record_extras(record)
        if extras:
            payload["_extra"] = extras

        trace = logging.Formatter().formatException(record.exc_info) if record.exc_info else None
        values = {
            "level": record.levelname,
            "event": getattr(record, "event", None) or record.name or "general",
            "logger_name": record.name,
            "path": getattr(record, "path", None) or record.pathname,
            "request_id": getattr(record, "request_id", None),
        }
        values = {key: _clip(value, _COLUMN_LIMITS[key]) for key, value in values.items()}
        values["message"] = json.dumps(payload, ensure_ascii=False, default=str)
        values["trace"] = trace
        return values

    def emit(self, record: logging.LogRecord) -> None:
        from .models.log import Log

        try:
            values = self.build_values(record)
            engine = self._resolve_engine()
            self._ensure_table(engine)
            with engine.begin() as conn:
                conn.execute(insert(Log).values(**values))
        except (DataError, OperationalError) as exc:
            # handleError would recurse into logging when the DB is down
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)
        except Exception:
            self.handleError(record)


__all__ = ["DBLogHandler"]
