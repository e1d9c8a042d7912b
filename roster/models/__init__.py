from __future__ import annotations

"""
Data Models Package.

Re-exports all Pydantic models for convenient imports:
    from roster.models import UserInput, UserRecord, UserStats
    from roster.models import RecordErrorCode, FormAction, MessageKind
    from roster.models import RepositoryResult, ServiceResult, FlashMessage, PageState
"""

from roster.models.enums import FormAction, MessageKind, RecordErrorCode
from roster.models.user import UserInput, UserRecord, UserStats
from roster.models.service_models import (
    FlashMessage,
    PageState,
    RepositoryResult,
    ServiceResult,
)

__all__ = [
    "FormAction",
    "MessageKind",
    "RecordErrorCode",
    "UserInput",
    "UserRecord",
    "UserStats",
    "FlashMessage",
    "PageState",
    "RepositoryResult",
    "ServiceResult",
]
