"""
Shared Enumerations for Roster Models.

All string enumerations for type-safe field constraints.
StrEnum values compare equal to their string equivalents,
so code like ``if code == 'not_found'`` continues to work.
"""

from __future__ import annotations
from enum import StrEnum


class RecordErrorCode(StrEnum):
    """Why a repository or handler operation did not succeed.

    ``NOT_FOUND`` (zero rows matched) is kept apart from
    ``STORAGE_ERROR`` (the statement itself failed) so callers can
    react to each precisely.
    """

    NOT_FOUND = "not_found"
    EMAIL_TAKEN = "email_taken"
    CONSTRAINT_VIOLATION = "constraint_violation"
    VALIDATION_ERROR = "validation_error"
    CONNECTION_ERROR = "connection_error"
    STORAGE_ERROR = "storage_error"


class FormAction(StrEnum):
    """Actions accepted from the record-management form."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class MessageKind(StrEnum):
    """Display category of a flash message."""

    SUCCESS = "success"
    ERROR = "error"
