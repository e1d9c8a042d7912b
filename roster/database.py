"""
Database Abstraction Layer.

Owns the single SQLite connection used by the Roster repositories.
SQLite is the relational store for user records; the file path comes
from :class:`~roster.config.AppConfig` (``DATABASE_PATH``).

Data access is performed through the Repository pattern.  This module only
manages the raw database *connection*; it contains no query logic.

Connection failures are surfaced as :class:`~roster.errors.StorageConnectionError`
rather than a ``None`` handle, so a caller can never carry on with a
connection that does not exist.

Usage (dependency injection at app startup)::

    from roster.database import DatabaseManager
    from roster.logger import StructuredLogger

    db = DatabaseManager(
        sqlite_path=Path(config.DATABASE_PATH),
        logger=StructuredLogger("roster.database", config),
    )
    db.connect()
    # Inject `db` into repositories / services that need it.
"""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional, Union

from roster.errors import StorageConnectionError
from roster.logger import StructuredLogger


class DatabaseManager:
    """Manages the connection to the local SQLite database.

    Fully configured at construction time via dependency injection; the
    connection itself is opened by :meth:`connect`.  No retries and no
    pooling: one manager holds one connection.

    Parameters
    ----------
    sqlite_path:
        Filesystem path for the SQLite database file, or ``":memory:"``.
        Parent directories must already exist.
    logger:
        A ``StructuredLogger`` instance for structured JSON log output.
    """

    def __init__(
        self,
        sqlite_path: Union[Path, str],
        logger: StructuredLogger,
    ) -> None:
        self._path: str = str(sqlite_path)
        self._logger: StructuredLogger = logger
        self._write_lock: threading.RLock = threading.RLock()
        self._in_transaction: bool = False
        self._sqlite_conn: Optional[sqlite3.Connection] = None

    # ------------------------------------------------------------------
    # Public properties
    # ------------------------------------------------------------------

    @property
    def is_connected(self) -> bool:
        """``True`` once :meth:`connect` has succeeded and until :meth:`close`."""
        return self._sqlite_conn is not None

    @property
    def sqlite(self) -> sqlite3.Connection:
        """Return the open SQLite connection.

        Raises
        ------
        StorageConnectionError
            If :meth:`connect` has not been called successfully, or the
            connection has been closed.
        """
        if self._sqlite_conn is None:
            raise StorageConnectionError(
                f"No open connection to '{self._path}'. Call connect() first."
            )
        return self._sqlite_conn

    @property
    def in_transaction(self) -> bool:
        """``True`` while a :meth:`transaction` block is active."""
        return self._in_transaction

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> sqlite3.Connection:
        """Open the database and return the connection handle.

        Idempotent: a second call returns the already-open connection.

        Returns
        -------
        sqlite3.Connection
            A configured connection with ``row_factory`` set to
            ``sqlite3.Row`` for dict-like row access.

        Raises
        ------
        StorageConnectionError
            If the file cannot be opened or is not a SQLite database.
        """
        if self._sqlite_conn is not None:
            return self._sqlite_conn

        conn: Optional[sqlite3.Connection] = None
        try:
            conn = sqlite3.connect(self._path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON;")
            # Forces the header read so a corrupt file fails here.
            conn.execute("SELECT COUNT(*) FROM sqlite_master").fetchone()
        except (sqlite3.Error, OSError) as exc:
            if conn is not None:
                conn.close()
            msg = (
                f"Cannot open the database at '{self._path}': {exc}. "
                "Check that the directory exists and is writable."
            )
            self._logger.error(msg)
            raise StorageConnectionError(msg, original_error=exc) from exc

        self._sqlite_conn = conn
        self._logger.info("SQLite database opened at %s", self._path)
        return conn

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Run the enclosed statements as one SQLite write transaction.

        ``BEGIN IMMEDIATE`` takes the database write lock up front, so a
        read-then-write sequence inside the block cannot interleave with
        another writer.  On normal exit a single ``COMMIT`` is issued; on
        exception the transaction is rolled back and the error re-raised.

        Re-entrant: a nested block joins the outer transaction.

        Example::

            with db.transaction() as conn:
                conn.execute("SELECT ...")
                conn.execute("INSERT ...")
        """
        conn = self.sqlite
        with self._write_lock:
            if self._in_transaction:
                yield conn
                return

            if conn.in_transaction:
                conn.commit()
            conn.execute("BEGIN IMMEDIATE")
            self._in_transaction = True
            try:
                yield conn
                conn.commit()
            except BaseException:
                conn.rollback()
                self._logger.debug("Transaction rolled back.")
                raise
            finally:
                self._in_transaction = False

    def close(self) -> None:
        """Close the SQLite connection.

        Safe to call multiple times; subsequent calls are no-ops.
        """
        with self._write_lock:
            if self._sqlite_conn is not None:
                try:
                    self._sqlite_conn.close()
                    self._logger.info("SQLite connection closed.")
                except sqlite3.ProgrammingError:
                    # Connection was already closed; nothing to do.
                    pass
                finally:
                    self._sqlite_conn = None
