import logging

from roster.config import AppConfig, get_config, reset_config


def test_defaults():
    config = AppConfig()

    assert config.DATABASE_PATH == "roster.db"
    assert config.SEED_SAMPLE_DATA is False
    assert config.LOG_FILE == "roster.log"
    assert config.LOG_MAX_BYTES == 5_242_880
    assert config.LOG_BACKUP_COUNT == 3
    assert config.log_level == logging.INFO


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DATABASE_PATH", "/var/lib/roster/users.db")
    monkeypatch.setenv("SEED_SAMPLE_DATA", "true")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = AppConfig()

    assert config.DATABASE_PATH == "/var/lib/roster/users.db"
    assert config.SEED_SAMPLE_DATA is True
    assert config.log_level == logging.DEBUG


def test_dotenv_file_is_read(tmp_path):
    (tmp_path / ".env").write_text("DATABASE_PATH=from-dotenv.db\nUNRELATED=1\n", encoding="utf-8")

    assert AppConfig().DATABASE_PATH == "from-dotenv.db"


def test_unknown_log_level_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    assert AppConfig().log_level == logging.INFO


def test_missing_env_file_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="roster.config"):
        AppConfig(DATABASE_PATH=":memory:")

    messages = " ".join(record.getMessage() for record in caplog.records)
    assert "No .env file found" in messages
    assert "':memory:'" in messages


def test_get_config_is_cached_until_reset(monkeypatch):
    first = get_config()
    assert get_config() is first

    monkeypatch.setenv("DATABASE_PATH", "other.db")
    reset_config()

    assert get_config() is not first
    assert get_config().DATABASE_PATH == "other.db"
