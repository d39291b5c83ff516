"""Infrastructure layer: concrete implementations of application ports."""

from yumcontacts.infrastructure.factory import create_repository
from yumcontacts.infrastructure.memory_repository import InMemoryContactRepository
from yumcontacts.infrastructure.persistence.neo4j_repository import (
    Neo4jContactRepository,
    ensure_contact_constraint,
)
from yumcontacts.infrastructure.persistence.sql_repository import (
    SqlContactRepository,
    create_sql_engine,
)
from yumcontacts.infrastructure.phone import format_phone, normalize_phone

__all__ = [
    "InMemoryContactRepository",
    "Neo4jContactRepository",
    "SqlContactRepository",
    "create_repository",
    "create_sql_engine",
    "ensure_contact_constraint",
    "format_phone",
    "normalize_phone",
]
