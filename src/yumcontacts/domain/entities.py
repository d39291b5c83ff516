"""Domain entity: Contact."""

from dataclasses import dataclass, field, replace
from datetime import datetime

# Creator id used when nobody was signed in while the contact was created.
ANONYMOUS_CREATOR_ID = "anonymous"
ANONYMOUS_DISPLAY_NAME = "Anonymous"

# Ids are signed 64-bit integers in every backend.
MAX_CONTACT_ID = 2**63 - 1

_TEXT_FIELDS = (
    "first_name",
    "last_name",
    "address",
    "email",
    "phone",
    "created_by",
    "created_by_id",
)


@dataclass(frozen=True)
class Contact:
    """
    A person's contact details plus creation provenance.
    id 0 means the contact has not been persisted yet; backends assign ids on add.
    """

    id: int = 0
    first_name: str = ""
    last_name: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""
    created_by: str = ""
    created_by_id: str = ""
    created_at: datetime | None = field(default=None, compare=False)
    last_edited: datetime | None = field(default=None, compare=False)

    def __post_init__(self):
        if self.id is None:
            object.__setattr__(self, "id", 0)
        if not isinstance(self.id, int) or not 0 <= self.id <= MAX_CONTACT_ID:
            raise ValueError(f"Contact id must be a non-negative 64-bit integer, got {self.id!r}.")
        for name in _TEXT_FIELDS:
            if getattr(self, name) is None:
                object.__setattr__(self, name, "")
        if self.created_by_id == ANONYMOUS_CREATOR_ID:
            object.__setattr__(self, "created_by", "")

    @property
    def created_by_display_name(self) -> str:
        """Name to show for whoever created this contact."""
        if self.created_by_id == ANONYMOUS_CREATOR_ID:
            return ANONYMOUS_DISPLAY_NAME
        return self.created_by

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_persisted(self) -> bool:
        return self.id != 0

    def with_anonymous_creator(self) -> "Contact":
        """Return a copy whose creator is the anonymous sentinel (creator name cleared)."""
        return replace(self, created_by="", created_by_id=ANONYMOUS_CREATOR_ID)
