"""DTOs for contact forms, the signed-in user, and assistant webhook exchanges."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class UserProfile:
    """The signed-in user, as kept in the session."""

    id: str
    display_name: str


@dataclass(frozen=True)
class ContactForm:
    """Values submitted from the add/edit form (see templates/edit.html)."""

    first_name: str = ""
    last_name: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""
    created_by: str = ""
    created_by_id: str = ""


@dataclass(frozen=True)
class AssistantContact:
    """Contact fields an assistant request can carry in its parameters."""

    given_name: str = ""
    last_name: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""

    @property
    def display_name(self) -> str:
        return f"{self.given_name} {self.last_name}".strip()


@dataclass(frozen=True)
class AssistantRequest:
    intent_name: str
    parameters: dict[str, str] = field(default_factory=dict)
    session_id: str = ""
    request_id: str = ""
    timestamp: datetime | None = None


@dataclass
class AssistantMessage:
    speech: str
    display_text: str
    source: str
