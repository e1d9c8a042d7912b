"""
Base Repository.

Provides shared infrastructure for all repositories:
- DatabaseManager reference
- Logger reference
- Convenience property for the SQLite connection
- Read helper that turns storage errors into typed defaults
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Callable, TypeVar

from roster.database import DatabaseManager
from roster.logger import StructuredLogger

T = TypeVar("T")


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with microseconds.

    All timestamps are written in this one format so that SQL string
    comparison (``MAX``, ``ORDER BY``) agrees with chronological order.
    """
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class BaseRepository:
    """Base class for all repositories. Receives dependencies via __init__."""

    TABLE: str = ""

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        self._db = db
        self._logger = logger

    @property
    def sqlite(self) -> sqlite3.Connection:
        """Returns the SQLite connection; raises ``StorageConnectionError`` if closed."""
        return self._db.sqlite

    def _execute_read(
        self,
        sqlite_op: Callable[[], T],
        default_factory: Callable[[], T],
        *,
        operation_name: str,
    ) -> T:
        """Run a read query, falling back to a typed default on SQLite errors.

        NOT intended for write paths: writes report their failures through
        :class:`~roster.models.RepositoryResult` instead.

        ``StorageConnectionError`` is not caught; a missing connection is a
        distinct failure the caller has to see.

        Parameters
        ----------
        sqlite_op:
            Zero-argument callable that performs the query.
        default_factory:
            Zero-argument callable producing the value returned when the
            query raises ``sqlite3.Error``.
        operation_name:
            Human-readable label for log messages, e.g.
            ``"read_all (users)"``.
        """
        try:
            return sqlite_op()
        except sqlite3.Error as exc:
            self._logger.error(
                "SQLite read failed for %s: %s", operation_name, exc, exc_info=True,
            )
            return default_factory()

