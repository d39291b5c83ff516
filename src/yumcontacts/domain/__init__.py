"""Domain layer: the Contact entity and error taxonomy. No dependencies on outer layers."""

from yumcontacts.domain.entities import (
    ANONYMOUS_CREATOR_ID,
    ANONYMOUS_DISPLAY_NAME,
    MAX_CONTACT_ID,
    Contact,
)
from yumcontacts.domain.errors import (
    ContactError,
    ContactNotFound,
    InvalidArgument,
    PayloadError,
    StorageError,
    UnexpectedRowCount,
)

__all__ = [
    "ANONYMOUS_CREATOR_ID",
    "ANONYMOUS_DISPLAY_NAME",
    "MAX_CONTACT_ID",
    "Contact",
    "ContactError",
    "ContactNotFound",
    "InvalidArgument",
    "PayloadError",
    "StorageError",
    "UnexpectedRowCount",
]
