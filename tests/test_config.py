"""Tests for configuration loading and backend selection."""

import pytest

from yumcontacts.config import Config
from yumcontacts.infrastructure import (
    InMemoryContactRepository,
    SqlContactRepository,
    create_repository,
)

ENV_VARS = (
    "CONTACTS_BACKEND",
    "DATABASE_URL",
    "NEO4J_URI",
    "NEO4J_USER",
    "NEO4J_PASSWORD",
    "SESSION_SECRET",
    "SESSION_HTTPS_ONLY",
    "DEFAULT_PHONE_REGION",
    "ASSISTANT_SOURCE",
    "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    config = Config.from_env(load_dotenv_file=False)
    assert config == Config()
    assert config.backend == "memory"
    assert config.session_https_only is False


def test_values_from_environment(clean_env):
    clean_env.setenv("CONTACTS_BACKEND", "SQL")
    clean_env.setenv("DATABASE_URL", "sqlite://")
    clean_env.setenv("SESSION_HTTPS_ONLY", "true")
    clean_env.setenv("DEFAULT_PHONE_REGION", "it")
    clean_env.setenv("LOG_LEVEL", "debug")

    config = Config.from_env(load_dotenv_file=False)
    assert config.backend == "sql"
    assert config.database_url == "sqlite://"
    assert config.session_https_only is True
    assert config.default_phone_region == "IT"
    assert config.log_level == "DEBUG"


def test_unknown_backend_rejected(clean_env):
    clean_env.setenv("CONTACTS_BACKEND", "datastore")
    with pytest.raises(ValueError, match="Unknown contacts backend"):
        Config.from_env(load_dotenv_file=False)


def test_create_repository_memory():
    repo = create_repository(Config(backend="memory"))
    assert isinstance(repo, InMemoryContactRepository)
    repo.close()


def test_create_repository_sql():
    repo = create_repository(Config(backend="sql", database_url="sqlite://"))
    assert isinstance(repo, SqlContactRepository)
    assert repo.count_contacts() == 0
    repo.close()
