"""
Repository Layer Package.

Provides data-access abstractions over the SQLite store.
All database operations flow through repositories; services never access
db.sqlite directly.

Usage:
    from roster.repositories.user_repository import UserRepository
"""

from roster.repositories.base_repository import BaseRepository
from roster.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
]
