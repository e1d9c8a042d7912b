"""
Business Logic Services Package.

Services depend on the Repository layer for data access.

The ``create_services()`` factory wires every repository and service together,
returning a typed dict that the application layer (views / commands) can
consume without knowing the internal dependency graph.
"""

from __future__ import annotations

from typing import TypedDict

from roster.database import DatabaseManager
from roster.logger import StructuredLogger
from roster.repositories.user_repository import UserRepository
from roster.services.user_admin import UserAdminService


class ServiceContainer(TypedDict):
    """Typed container for all application services."""

    user_repository: UserRepository
    user_admin_service: UserAdminService


def create_services(
    db: DatabaseManager,
    logger: StructuredLogger,
) -> ServiceContainer:
    """
    Wire all repositories and services together.

    This is the single composition root for the service layer.  The
    application entry-point calls this once at startup and passes the
    returned dict to views / commands as needed.

    Args:
        db: DatabaseManager whose connection is already open.
        logger: Logger shared by repositories and services.

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    user_repo = UserRepository(db=db, logger=logger)
    user_admin_service = UserAdminService(repo=user_repo, logger=logger)

    return ServiceContainer(
        user_repository=user_repo,
        user_admin_service=user_admin_service,
    )
