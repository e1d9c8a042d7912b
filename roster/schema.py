"""
Centralized SQLite Schema Initialization.

Defines the canonical schema for the Roster database and provides a single
entry-point -- :func:`initialize_schema` -- that creates all required
tables idempotently.  A lightweight ``schema_version`` table records which
schema version the file was created with.

Email uniqueness is enforced here by a ``UNIQUE`` constraint; the
repository's pre-check only turns a violation into a friendly message.

Usage::

    from roster.config import get_config
    from roster.database import DatabaseManager
    from roster.logger import StructuredLogger
    from roster.schema import initialize_schema

    config = get_config()
    db = DatabaseManager(config.DATABASE_PATH, StructuredLogger("roster.database", config))
    initialize_schema(db.connect(), StructuredLogger("roster.schema", config))
"""

from __future__ import annotations

import sqlite3

from roster.logger import StructuredLogger

__all__ = ["CURRENT_SCHEMA_VERSION", "USERS_TABLE", "initialize_schema"]

# ---------------------------------------------------------------------------
# Schema version -- bump this whenever the DDL changes.
# ---------------------------------------------------------------------------
CURRENT_SCHEMA_VERSION: int = 1

USERS_TABLE: str = "users"

# ---------------------------------------------------------------------------
# DDL statements for every table in the database.
# ---------------------------------------------------------------------------
_TABLE_DEFINITIONS: list[str] = [
    # -- user records ---------------------------------------------------------
    f"""
    CREATE TABLE IF NOT EXISTS {USERS_TABLE} (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        nom TEXT NOT NULL CHECK (length(nom) > 0),
        prenom TEXT NOT NULL CHECK (length(prenom) > 0),
        email TEXT NOT NULL UNIQUE CHECK (length(email) > 0),
        telephone TEXT,
        created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP NULL DEFAULT NULL
    )
    """,
]


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------

def _ensure_version_table(conn: sqlite3.Connection) -> None:
    """Create the ``schema_version`` table if it does not yet exist.

    This is executed *before* any version check so that a brand-new
    database can be bootstrapped cleanly.
    """
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_version (
            id INTEGER PRIMARY KEY CHECK (id = 1),
            version INTEGER NOT NULL,
            applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
        """
    )
    conn.commit()


def _get_schema_version(conn: sqlite3.Connection) -> int:
    """Return the current schema version, or ``0`` if unset."""
    cursor: sqlite3.Cursor = conn.execute(
        "SELECT version FROM schema_version WHERE id = 1"
    )
    row = cursor.fetchone()
    return row[0] if row is not None else 0


def _set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    """Upsert the single-row version tracker to *version*.

    Does **not** commit; the caller is responsible for transaction
    management so that version updates are atomic with schema changes.
    """
    conn.execute(
        """
        INSERT INTO schema_version (id, version) VALUES (1, ?)
        ON CONFLICT(id) DO UPDATE SET version = excluded.version,
                                      applied_at = CURRENT_TIMESTAMP
        """,
        (version,),
    )


def _create_all_tables(conn: sqlite3.Connection, logger: StructuredLogger) -> None:
    """Execute every DDL statement in :data:`_TABLE_DEFINITIONS`.

    Does **not** commit; the caller is responsible for transaction
    management.
    """
    for ddl in _TABLE_DEFINITIONS:
        conn.execute(ddl)
    logger.info(
        f"All {len(_TABLE_DEFINITIONS)} tables created or verified successfully."
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def initialize_schema(conn: sqlite3.Connection, logger: StructuredLogger) -> None:
    """Ensure the SQLite database matches the current schema version.

    Workflow:
        1. Guarantee the ``schema_version`` table exists (separate commit).
        2. Read the stored version number (``0`` for a fresh database).
        3. If the stored version equals or exceeds
           :data:`CURRENT_SCHEMA_VERSION`, return immediately.
        4. Otherwise create all tables and record the version in a single
           transaction.  On failure everything is rolled back so the next
           startup retries.

    Designed to be called on every application startup; fully idempotent.

    Args:
        conn: An open SQLite connection.
        logger: A :class:`~roster.logger.StructuredLogger` instance.
    """
    _ensure_version_table(conn)
    current: int = _get_schema_version(conn)

    if current >= CURRENT_SCHEMA_VERSION:
        logger.info(f"Schema is up to date (version {current}).")
        return

    logger.info(
        f"Upgrading schema from version {current} "
        f"to {CURRENT_SCHEMA_VERSION} …"
    )

    try:
        _create_all_tables(conn, logger)
        _set_schema_version(conn, CURRENT_SCHEMA_VERSION)
        conn.commit()
    except Exception:
        conn.rollback()
        logger.error(
            f"Schema initialisation failed; rolled back to version {current}."
        )
        raise

    logger.info(f"Schema initialised at version {CURRENT_SCHEMA_VERSION}.")
