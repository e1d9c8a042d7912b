import io
import uuid

import pytest

from roster.config import AppConfig, reset_config
from roster.database import DatabaseManager
from roster.logger import StructuredLogger
from roster.models import UserInput
from roster.repositories import UserRepository
from roster.schema import initialize_schema
from roster.services.user_admin import UserAdminService


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch):
    """Run every test in an empty directory with no ROSTER-relevant env vars."""
    for var in ("DATABASE_PATH", "SEED_SAMPLE_DATA", "LOG_LEVEL", "LOG_FILE",
                "LOG_MAX_BYTES", "LOG_BACKUP_COUNT"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def logger(log_stream):
    # Unique name: handlers are attached once per logging.Logger name.
    return StructuredLogger(
        f"test.{uuid.uuid4().hex}", AppConfig(LOG_FILE=""), stream=log_stream,
    )


@pytest.fixture
def db(logger):
    manager = DatabaseManager(sqlite_path=":memory:", logger=logger)
    initialize_schema(manager.connect(), logger)
    yield manager
    manager.close()


@pytest.fixture
def repo(db, logger):
    return UserRepository(db=db, logger=logger)


@pytest.fixture
def service(repo, logger):
    return UserAdminService(repo=repo, logger=logger)


@pytest.fixture
def dupont():
    return UserInput(
        last_name="Dupont",
        first_name="Jean",
        email="jean.dupont@email.com",
        phone="0123456789",
    )


@pytest.fixture
def martin():
    return UserInput(
        last_name="Martin",
        first_name="Marie",
        email="marie.martin@email.com",
        phone="0987654321",
    )
