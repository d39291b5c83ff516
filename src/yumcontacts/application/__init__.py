"""Application layer: use cases, ports, and DTOs. Depends only on domain."""

from yumcontacts.application.assistant import AssistantDispatcher, extract_contact
from yumcontacts.application.contact_service import ContactService
from yumcontacts.application.dto import (
    AssistantContact,
    AssistantMessage,
    AssistantRequest,
    ContactForm,
    UserProfile,
)
from yumcontacts.application.ports import ContactRepository

__all__ = [
    "AssistantContact",
    "AssistantDispatcher",
    "AssistantMessage",
    "AssistantRequest",
    "ContactForm",
    "ContactRepository",
    "ContactService",
    "UserProfile",
    "extract_contact",
]
