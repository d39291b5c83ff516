"""
yum-contacts core: clean-architecture layout.

- domain: Contact entity and error taxonomy. No outer dependencies.
- application: use cases (ContactService, AssistantDispatcher), ports (ContactRepository), DTOs.
- infrastructure: adapters (InMemoryContactRepository, SqlContactRepository, Neo4jContactRepository).
"""

from yumcontacts.application import (
    AssistantContact,
    AssistantDispatcher,
    AssistantMessage,
    AssistantRequest,
    ContactForm,
    ContactRepository,
    ContactService,
    UserProfile,
)
from yumcontacts.config import Config
from yumcontacts.domain import (
    ANONYMOUS_CREATOR_ID,
    Contact,
    ContactError,
    ContactNotFound,
    InvalidArgument,
    PayloadError,
    StorageError,
    UnexpectedRowCount,
)
from yumcontacts.infrastructure import (
    InMemoryContactRepository,
    Neo4jContactRepository,
    SqlContactRepository,
    create_repository,
)

__all__ = [
    "ANONYMOUS_CREATOR_ID",
    "AssistantContact",
    "AssistantDispatcher",
    "AssistantMessage",
    "AssistantRequest",
    "Config",
    "Contact",
    "ContactError",
    "ContactForm",
    "ContactNotFound",
    "ContactRepository",
    "ContactService",
    "InMemoryContactRepository",
    "InvalidArgument",
    "Neo4jContactRepository",
    "PayloadError",
    "SqlContactRepository",
    "StorageError",
    "UnexpectedRowCount",
    "UserProfile",
    "create_repository",
]
