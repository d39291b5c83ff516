"""Pick the ContactRepository implementation named by the configuration."""

import logging

from neo4j import GraphDatabase

from yumcontacts.application.ports import ContactRepository
from yumcontacts.config import BACKEND_MEMORY, BACKEND_NEO4J, BACKEND_SQL, Config
from yumcontacts.infrastructure.memory_repository import InMemoryContactRepository
from yumcontacts.infrastructure.persistence.neo4j_repository import Neo4jContactRepository
from yumcontacts.infrastructure.persistence.sql_repository import SqlContactRepository

logger = logging.getLogger(__name__)


def _get_driver(config: Config):
    return GraphDatabase.driver(config.neo4j_uri, auth=(config.neo4j_user, config.neo4j_password))


def create_repository(config: Config) -> ContactRepository:
    """Build the configured backend. The caller owns it and must close() it."""
    logger.info("Using %s contacts backend", config.backend)
    if config.backend == BACKEND_MEMORY:
        return InMemoryContactRepository()
    if config.backend == BACKEND_SQL:
        return SqlContactRepository.from_url(config.database_url)
    if config.backend == BACKEND_NEO4J:
        driver = _get_driver(config)
        try:
            return Neo4jContactRepository(driver, owns_driver=True)
        except Exception:
            driver.close()
            raise
    raise ValueError(f"Unknown contacts backend {config.backend!r}")
