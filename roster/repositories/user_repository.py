"""
User Repository.

Handles all persistence for user records in the ``users`` table.

Every statement is parameterized; only the table name (a class constant)
is interpolated.  Free-text fields are sanitized (markup stripped, HTML
escaped) before they are written, so stored values are display-safe.

Email uniqueness is checked and written inside one ``BEGIN IMMEDIATE``
transaction, and the ``UNIQUE`` constraint on ``users.email`` backs it up:
a violation that slips past the check is still reported as
``EMAIL_TAKEN``.
"""

from __future__ import annotations

import sqlite3
from typing import Optional

from roster.database import DatabaseManager
from roster.logger import StructuredLogger
from roster.models.enums import RecordErrorCode
from roster.models.service_models import RepositoryResult
from roster.models.user import UserInput, UserRecord, UserStats
from roster.repositories.base_repository import BaseRepository, utc_timestamp
from roster.schema import USERS_TABLE
from roster.utils.sanitize import sanitize_optional_text, sanitize_text

_REQUIRED_COLUMNS: tuple[str, ...] = ("nom", "prenom", "email")


class UserRepository(BaseRepository):
    """Data access layer for user records.

    Reads return values (a list, a record or ``None``, a number).
    Writes return a :class:`RepositoryResult` whose ``error_code`` tells
    ``NOT_FOUND`` apart from ``EMAIL_TAKEN``, ``CONSTRAINT_VIOLATION``
    and ``STORAGE_ERROR``.
    """

    TABLE = USERS_TABLE

    def __init__(self, db: DatabaseManager, logger: StructuredLogger) -> None:
        super().__init__(db, logger)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read_all(self) -> list[UserRecord]:
        """Fetch all users, most recently created first (``id`` descending)."""
        def _sqlite() -> list[UserRecord]:
            rows = self.sqlite.execute(
                f"SELECT * FROM {self.TABLE} ORDER BY id DESC"
            ).fetchall()
            return [UserRecord.model_validate(dict(row)) for row in rows]

        return self._execute_read(
            _sqlite, list, operation_name="read_all (users)",
        )

    def read_one(self, user_id: int) -> Optional[UserRecord]:
        """Fetch a user by primary key, or ``None`` when no row has that id."""
        def _sqlite() -> Optional[UserRecord]:
            row = self.sqlite.execute(
                f"SELECT * FROM {self.TABLE} WHERE id = ? LIMIT 1", (user_id,)
            ).fetchone()
            return UserRecord.model_validate(dict(row)) if row else None

        return self._execute_read(
            _sqlite, lambda: None, operation_name="read_one (users)",
        )

    def email_exists(self, email: str, exclude_id: Optional[int] = None) -> bool:
        """Return ``True`` if another record already uses *email*.

        *email* is sanitized first so it is compared with the value that
        would actually be stored.  When *exclude_id* is given, that
        record's own row is ignored, which lets an update keep its
        current address.
        """
        return self._execute_read(
            lambda: self._email_taken(self.sqlite, sanitize_text(email).strip(), exclude_id),
            lambda: False,
            operation_name="email_exists (users)",
        )

    def count(self) -> int:
        """Return the number of stored users."""
        def _sqlite() -> int:
            row = self.sqlite.execute(
                f"SELECT COUNT(*) AS total FROM {self.TABLE}"
            ).fetchone()
            return int(row["total"])

        return self._execute_read(_sqlite, int, operation_name="count (users)")

    def stats(self) -> UserStats:
        """Return record totals, plus how many have an email and a phone."""
        def _sqlite() -> UserStats:
            row = self.sqlite.execute(
                f"""
                SELECT COUNT(*) AS total,
                       COALESCE(SUM(CASE WHEN email IS NOT NULL AND email != ''
                                         THEN 1 ELSE 0 END), 0) AS with_email,
                       COALESCE(SUM(CASE WHEN telephone IS NOT NULL AND telephone != ''
                                         THEN 1 ELSE 0 END), 0) AS with_phone
                FROM {self.TABLE}
                """
            ).fetchone()
            return UserStats(**dict(row))

        return self._execute_read(_sqlite, UserStats, operation_name="stats (users)")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create(self, data: UserInput) -> RepositoryResult:
        """Insert a new user and return it with its storage-assigned ``id``.

        ``created_at`` never precedes the newest existing ``created_at``,
        keeping creation times ordered like ids.
        """
        values = self._sanitize(data)
        if values is None:
            return self._empty_after_sanitize()

        try:
            with self._db.transaction() as conn:
                if self._email_taken(conn, values["email"], None):
                    return self._email_taken_result(values["email"])
                cursor = conn.execute(
                    f"""
                    INSERT INTO {self.TABLE} (nom, prenom, email, telephone, created_at)
                    VALUES (:nom, :prenom, :email, :telephone,
                            MAX(:now, COALESCE((SELECT MAX(created_at) FROM {self.TABLE}), '')))
                    """,
                    {**values, "now": utc_timestamp()},
                )
                row = conn.execute(
                    f"SELECT * FROM {self.TABLE} WHERE id = ?", (cursor.lastrowid,)
                ).fetchone()
        except sqlite3.IntegrityError as exc:
            return self._integrity_failure(exc, "create")
        except sqlite3.Error as exc:
            return self._storage_failure(exc, "create")

        user = UserRecord.model_validate(dict(row))
        self._logger.info("User created: %s", user.id)
        return RepositoryResult.ok(user)

    def update(self, user_id: int, data: UserInput) -> RepositoryResult:
        """Overwrite every mutable column of user *user_id* and stamp ``updated_at``.

        ``updated_at`` is clamped so it is never earlier than ``created_at``.

        *data* must be raw user input.  Values read back from the table are
        already escaped, and passing them here escapes them a second time
        (``O&#039;Brien`` is stored as ``O&amp;#039;Brien``).
        """
        values = self._sanitize(data)
        if values is None:
            return self._empty_after_sanitize()

        try:
            with self._db.transaction() as conn:
                exists = conn.execute(
                    f"SELECT 1 FROM {self.TABLE} WHERE id = ?", (user_id,)
                ).fetchone()
                if exists is None:
                    return self._not_found(user_id, "update")
                if self._email_taken(conn, values["email"], user_id):
                    return self._email_taken_result(values["email"])
                cursor = conn.execute(
                    f"""
                    UPDATE {self.TABLE}
                    SET nom = :nom, prenom = :prenom, email = :email,
                        telephone = :telephone,
                        updated_at = MAX(:now, created_at)
                    WHERE id = :id
                    """,
                    {**values, "now": utc_timestamp(), "id": user_id},
                )
                if cursor.rowcount == 0:
                    return self._not_found(user_id, "update")
                row = conn.execute(
                    f"SELECT * FROM {self.TABLE} WHERE id = ?", (user_id,)
                ).fetchone()
        except sqlite3.IntegrityError as exc:
            return self._integrity_failure(exc, "update")
        except sqlite3.Error as exc:
            return self._storage_failure(exc, "update")

        self._logger.info("User updated: %s", user_id)
        return RepositoryResult.ok(UserRecord.model_validate(dict(row)))

    def delete(self, user_id: int) -> RepositoryResult:
        """Hard-delete user *user_id*."""
        try:
            with self._db.transaction() as conn:
                cursor = conn.execute(
                    f"DELETE FROM {self.TABLE} WHERE id = ?", (user_id,)
                )
                if cursor.rowcount == 0:
                    return self._not_found(user_id, "delete")
        except sqlite3.Error as exc:
            return self._storage_failure(exc, "delete")

        self._logger.info("User deleted: %s", user_id)
        return RepositoryResult.ok()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _email_taken(
        self,
        conn: sqlite3.Connection,
        email: str,
        exclude_id: Optional[int],
    ) -> bool:
        query = f"SELECT id FROM {self.TABLE} WHERE email = ?"
        params: tuple[object, ...] = (email,)
        if exclude_id is not None:
            query += " AND id != ?"
            params = (email, exclude_id)
        return conn.execute(query + " LIMIT 1", params).fetchone() is not None

    @staticmethod
    def _sanitize(data: UserInput) -> Optional[dict[str, Optional[str]]]:
        """Map *data* onto column names with every text field sanitized.

        Returns ``None`` if a required field is empty once markup is gone
        (e.g. a name that was only ``<b></b>``).
        """
        values: dict[str, Optional[str]] = {
            "nom": sanitize_text(data.last_name).strip(),
            "prenom": sanitize_text(data.first_name).strip(),
            "email": sanitize_text(data.email).strip(),
            "telephone": sanitize_optional_text(data.phone),
        }
        if any(not values[column] for column in _REQUIRED_COLUMNS):
            return None
        return values

    def _empty_after_sanitize(self) -> RepositoryResult:
        self._logger.warning("Rejected user input: required field empty after sanitization.")
        return RepositoryResult.fail(
            RecordErrorCode.VALIDATION_ERROR,
            "First name, last name and email are required.",
        )

    def _email_taken_result(self, email: str) -> RepositoryResult:
        self._logger.info("Email already in use: %s", email)
        return RepositoryResult.fail(
            RecordErrorCode.EMAIL_TAKEN, f"Email '{email}' is already in use.",
        )

    def _not_found(self, user_id: int, operation: str) -> RepositoryResult:
        self._logger.warning("Cannot %s user %s: not found.", operation, user_id)
        return RepositoryResult.fail(
            RecordErrorCode.NOT_FOUND, f"User {user_id} not found.",
        )

    def _integrity_failure(self, exc: sqlite3.IntegrityError, operation: str) -> RepositoryResult:
        if f"{self.TABLE}.email" in str(exc):
            self._logger.warning(
                "Unique email constraint rejected %s: %s", operation, exc,
            )
            return RepositoryResult.fail(
                RecordErrorCode.EMAIL_TAKEN, "Email is already in use.",
            )
        self._logger.error("Constraint violation during %s: %s", operation, exc)
        return RepositoryResult.fail(
            RecordErrorCode.CONSTRAINT_VIOLATION, f"Constraint violation: {exc}",
        )

    def _storage_failure(self, exc: sqlite3.Error, operation: str) -> RepositoryResult:
        self._logger.error(
            "SQLite %s failed on %s: %s", operation, self.TABLE, exc, exc_info=True,
        )
        return RepositoryResult.fail(
            RecordErrorCode.STORAGE_ERROR, f"Could not {operation} user: {exc}",
        )
