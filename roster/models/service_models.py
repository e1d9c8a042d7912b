"""
Service Layer Data Transfer Objects.

Pydantic models for validated input/output at the repository and service
boundaries.  Replaces raw booleans and dicts passed between layers.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from roster.models.enums import MessageKind, RecordErrorCode
from roster.models.user import UserRecord, UserStats

T = TypeVar("T")

__all__ = [
    "FlashMessage",
    "PageState",
    "RepositoryResult",
    "ServiceResult",
]


# ---------------------------------------------------------------------------
# Repository write results
# ---------------------------------------------------------------------------

class RepositoryResult(BaseModel):
    """Outcome of a repository write (create, update, delete).

    Truthy exactly when ``success`` is ``True``, so ``if repo.delete(5):``
    reads naturally while ``error_code`` still tells *why* a write failed.
    """

    success: bool
    data: Optional[UserRecord] = None
    error_code: Optional[RecordErrorCode] = None
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, data: Optional[UserRecord] = None) -> "RepositoryResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error_code: RecordErrorCode, error: str) -> "RepositoryResult":
        return cls(success=False, error_code=error_code, error=error)


# ---------------------------------------------------------------------------
# View-facing models
# ---------------------------------------------------------------------------

class FlashMessage(BaseModel):
    """One user-visible message produced by a form submission."""

    text: str
    kind: MessageKind


class PageState(BaseModel):
    """Everything the record-management page needs to render."""

    users: list[UserRecord] = Field(default_factory=list)
    edit_user: Optional[UserRecord] = None
    stats: UserStats = Field(default_factory=UserStats)


# ---------------------------------------------------------------------------
# Generic service models
# ---------------------------------------------------------------------------

class ServiceResult(BaseModel, Generic[T]):
    """
    Standard service return envelope.

    All service methods return this, providing a consistent contract
    for the view layer.

    Generic over ``T`` so callers can annotate return types precisely
    (e.g. ``ServiceResult[FlashMessage]``).  ``error_code`` carries the
    machine-readable failure kind alongside the human-readable ``error``.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    error_code: Optional[RecordErrorCode] = None
    status_code: int = 200
