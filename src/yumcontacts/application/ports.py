"""Application ports (interfaces). Implemented by infrastructure adapters."""

from typing import Protocol

from yumcontacts.domain import Contact


class ContactRepository(Protocol):
    """Persists and queries contacts. Implementations must be safe for concurrent callers."""

    def list_contacts(self) -> list[Contact]:
        """Return all contacts ordered by last name, then first name."""
        ...

    def list_contacts_created_by(self, user_id: str) -> list[Contact]:
        """Same ordering as list_contacts, filtered by creator id. Empty user_id means no filter."""
        ...

    def get_contact(self, contact_id: int) -> Contact:
        """Return the contact with the given id. Raises ContactNotFound."""
        ...

    def add_contact(self, contact: Contact) -> int:
        """Store a contact under a new id (any id on the input is ignored). Returns the id."""
        ...

    def update_contact(self, contact: Contact) -> None:
        """Overwrite the stored contact with contact.id. Exactly one record must change."""
        ...

    def delete_contact(self, contact_id: int) -> None:
        """Remove the contact. Exactly one record must be removed."""
        ...

    def count_contacts(self) -> int:
        """Return the number of stored contacts."""
        ...

    def find_contacts_by_name(self, first_name: str, last_name: str) -> list[Contact]:
        """Return contacts matching both names exactly (case-sensitive), ordered by id."""
        ...

    def close(self) -> None:
        """Release connections and handles. Safe to call more than once."""
        ...
