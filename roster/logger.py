"""
Roster log output.

Each component (database, schema, services, seed, main) receives its own
:class:`StructuredLogger`, built from the application's
:class:`~roster.config.AppConfig`: the level comes from ``LOG_LEVEL`` and an
optional rotating file from ``LOG_FILE``.  Every line is one JSON object,
so the ``AUDIT: {...}`` trail written by :mod:`roster.utils.audit` can be
filtered and parsed line by line.

The console handler writes to ``stderr``; ``stdout`` carries the page state
printed by ``main``.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, MutableMapping, Optional, TextIO

from roster.config import AppConfig

# Attributes present on every LogRecord; anything else arrived via ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
}


class JSONFormatter(logging.Formatter):
    """Render a record as ``{"timestamp", "level", "logger_name", "message"}``.

    Caller context passed through ``extra=`` is stringified under ``"extra"``;
    a traceback, when present, goes under ``"exception"``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
        }

        context = {
            key: str(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
        }
        if context:
            payload["extra"] = context

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        elif record.exc_text:
            payload["exception"] = record.exc_text

        return json.dumps(payload, ensure_ascii=False)


def _rotating_file(config: AppConfig) -> RotatingFileHandler:
    path = Path(config.LOG_FILE)
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(path),
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )


class StructuredLogger(logging.LoggerAdapter):
    """JSON logger for one Roster component.

    Handlers are attached the first time a *name* is configured; building
    another ``StructuredLogger`` with the same name reuses them and only
    re-applies the level.  The wrapped ``logging.Logger`` is available as
    ``.logger``.

    Usage::

        config = get_config()
        log = StructuredLogger("database", config)
        log.info("User created: %s", 42, extra={"email": "jean@example.com"})
    """

    def __init__(
        self,
        name: str,
        config: AppConfig,
        stream: Optional[TextIO] = None,
    ) -> None:
        super().__init__(logging.getLogger(name), extra=None)
        self.logger.setLevel(config.log_level)
        if self.logger.handlers:
            return

        self._attach(logging.StreamHandler(stream if stream is not None else sys.stderr))
        if not config.LOG_FILE:
            return
        try:
            self._attach(_rotating_file(config))
        except OSError as exc:
            self.warning(
                "Log file '%s' unavailable (%s); logging to console only.",
                config.LOG_FILE,
                exc,
            )

    def _attach(self, handler: logging.Handler) -> None:
        handler.setFormatter(JSONFormatter())
        self.logger.addHandler(handler)

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        # Pass the caller's ``extra`` through untouched.
        return msg, kwargs
