"""Exception types raised by the Roster infrastructure layer."""

from __future__ import annotations

from typing import Optional


class RosterError(Exception):
    """Base class for Roster exceptions."""

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        self.message: str = message
        self.original_error: Optional[Exception] = original_error
        super().__init__(self.message)


class StorageConnectionError(RosterError):
    """The relational store could not be opened (bad path, permissions, corrupt file)."""
