"""Runtime configuration, read once at startup from the environment (and .env)."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

BACKEND_MEMORY = "memory"
BACKEND_SQL = "sql"
BACKEND_NEO4J = "neo4j"
BACKENDS = (BACKEND_MEMORY, BACKEND_SQL, BACKEND_NEO4J)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Repo root: from src/yumcontacts/config.py go up to repo root
_REPO_ROOT = Path(__file__).resolve().parent.parent.parent


def load_env_file() -> None:
    """Load .env from repo root or current dir (first found wins)."""
    for path in (_REPO_ROOT / ".env", Path.cwd() / ".env"):
        if path.exists():
            load_dotenv(path)
            break


def _env(name: str, default: str) -> str:
    return (os.environ.get(name) or default).strip()


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Config:
    """Everything the app needs to wire its storage backend, sessions and webhook."""

    backend: str = BACKEND_MEMORY
    database_url: str = "sqlite:///yum_contacts.db"
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "password"
    session_secret: str = "something-very-secret"
    session_https_only: bool = False
    default_phone_region: str = "US"
    assistant_source: str = "yum-contacts assistant webhook"
    log_level: str = "INFO"

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ValueError(
                f"Unknown contacts backend {self.backend!r}; expected one of {', '.join(BACKENDS)}."
            )

    @classmethod
    def from_env(cls, *, load_dotenv_file: bool = True) -> "Config":
        if load_dotenv_file:
            load_env_file()
        defaults = cls()
        return cls(
            backend=_env("CONTACTS_BACKEND", defaults.backend).lower(),
            database_url=_env("DATABASE_URL", defaults.database_url),
            neo4j_uri=_env("NEO4J_URI", defaults.neo4j_uri),
            neo4j_user=_env("NEO4J_USER", defaults.neo4j_user),
            neo4j_password=_env("NEO4J_PASSWORD", defaults.neo4j_password),
            session_secret=_env("SESSION_SECRET", defaults.session_secret),
            session_https_only=_env_bool("SESSION_HTTPS_ONLY", defaults.session_https_only),
            default_phone_region=_env("DEFAULT_PHONE_REGION", defaults.default_phone_region).upper(),
            assistant_source=_env("ASSISTANT_SOURCE", defaults.assistant_source),
            log_level=_env("LOG_LEVEL", defaults.log_level).upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(format=LOG_FORMAT, level=level)
