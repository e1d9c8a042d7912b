"""
Sample Data.

The three demonstration users shipped with the original database script.
Seeding goes through :class:`UserRepository` so the rows are sanitized and
timestamped like any other record.
"""

from __future__ import annotations

from roster.logger import StructuredLogger
from roster.models.user import UserInput
from roster.repositories.user_repository import UserRepository

__all__ = ["SAMPLE_USERS", "seed_sample_users"]

SAMPLE_USERS: tuple[UserInput, ...] = (
    UserInput(last_name="Dupont", first_name="Jean",
              email="jean.dupont@email.com", phone="0123456789"),
    UserInput(last_name="Martin", first_name="Marie",
              email="marie.martin@email.com", phone="0987654321"),
    UserInput(last_name="Bernard", first_name="Pierre",
              email="pierre.bernard@email.com", phone="0147258369"),
)


def seed_sample_users(repo: UserRepository, logger: StructuredLogger) -> int:
    """Insert :data:`SAMPLE_USERS` into an empty table.

    Does nothing when at least one record already exists.

    Returns:
        The number of records inserted.
    """
    if repo.count() > 0:
        logger.info("Users table not empty; skipping sample data.")
        return 0

    inserted = 0
    for sample in SAMPLE_USERS:
        result = repo.create(sample)
        if result:
            inserted += 1
        else:
            logger.warning("Sample user %s not inserted: %s", sample.email, result.error)

    logger.info("Seeded %d sample user(s).", inserted)
    return inserted
