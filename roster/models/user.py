"""
User Record Models.

``UserInput`` is the value object handed to the repository for create and
update; ``UserRecord`` is what the repository hands back.  Neither is ever
mutated after construction.

Column names in the ``users`` table follow the original French schema
(``nom``, ``prenom``, ``telephone``); the aliases below map them onto the
English attribute names used throughout the code.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserInput(BaseModel):
    """Validated form input for creating or updating a user.

    Presence is the only rule: ``first_name``, ``last_name`` and ``email``
    must be non-blank after trimming.  A blank ``phone`` becomes ``None``.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    phone: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def _blank_phone_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class UserRecord(BaseModel):
    """A stored user row.

    ``created_at`` is set once on insert; ``updated_at`` stays ``None``
    until the first update.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True, populate_by_name=True)

    id: int
    last_name: str = Field(alias="nom")
    first_name: str = Field(alias="prenom")
    email: str
    phone: Optional[str] = Field(default=None, alias="telephone")
    created_at: datetime
    updated_at: Optional[datetime] = None


class UserStats(BaseModel):
    """Dashboard totals: records, and how many carry an email / a phone."""

    total: int = 0
    with_email: int = 0
    with_phone: int = 0
