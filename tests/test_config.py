import logging

import pytest
from pydantic import ValidationError

from app.config.config import Settings
from app.config.logger import _resolve_level, configure_logger


def _settings(**values):
    return Settings(_env_file=None, **values)


@pytest.mark.parametrize("level", ["REPEATABLE READ", "READ COMMITTED"])
def test_sqlite_rejects_non_serializable_isolation(level):
    with pytest.raises(ValidationError, match="not supported by SQLite"):
        _settings(DATABASE_URL=None, DB_ISOLATION_LEVEL=level)


@pytest.mark.parametrize("level", ["SERIALIZABLE", "REPEATABLE READ", "READ COMMITTED"])
def test_server_database_accepts_any_isolation(level):
    s = _settings(DATABASE_URL="postgresql+psycopg://admission@localhost/admission", DB_ISOLATION_LEVEL=level)
    assert s.db_isolation_level == level


def test_default_database_is_sqlite_file_in_data_dir(tmp_path):
    s = _settings(DATABASE_URL=None, DATA_DIR=str(tmp_path), DB_FILENAME="x.db")
    assert s.db_isolation_level == "SERIALIZABLE"
    assert s.database_url == f"sqlite:///{tmp_path.resolve() / 'x.db'}"


def test_log_level_resolution():
    assert _resolve_level(None, "dev") == logging.DEBUG
    assert _resolve_level(None, "prod") == logging.INFO
    assert _resolve_level("warning", "dev") == logging.WARNING
    with pytest.raises(ValueError):
        _resolve_level("loud", "dev")


def test_configure_logger_keeps_single_handler():
    first = configure_logger("admission_filter.tests", logging.INFO)
    again = configure_logger("admission_filter.tests", logging.WARNING)

    assert first is again
    assert len(again.handlers) == 1
    assert again.level == logging.WARNING
    assert again.handlers[0].level == logging.WARNING
