"""In-memory implementation of ContactRepository (no DB)."""

import threading
from dataclasses import replace
from datetime import datetime, timezone

from yumcontacts.domain import Contact, ContactNotFound, InvalidArgument


def _sort_key(contact: Contact) -> tuple[str, str, int]:
    return (contact.last_name, contact.first_name, contact.id)


class InMemoryContactRepository:
    """Stores contacts in a dict keyed by id. Ids start at 1 and are never reused."""

    def __init__(self) -> None:
        self._by_id: dict[int, Contact] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def list_contacts(self) -> list[Contact]:
        with self._lock:
            return sorted(self._by_id.values(), key=_sort_key)

    def list_contacts_created_by(self, user_id: str) -> list[Contact]:
        if not user_id:
            return self.list_contacts()
        with self._lock:
            mine = [c for c in self._by_id.values() if c.created_by_id == user_id]
        return sorted(mine, key=_sort_key)

    def get_contact(self, contact_id: int) -> Contact:
        with self._lock:
            contact = self._by_id.get(contact_id)
        if contact is None:
            raise ContactNotFound(contact_id)
        return contact

    def add_contact(self, contact: Contact) -> int:
        now = datetime.now(timezone.utc)
        with self._lock:
            contact_id = self._next_id
            self._next_id += 1
            self._by_id[contact_id] = replace(
                contact,
                id=contact_id,
                created_at=now,
                last_edited=contact.last_edited or now,
            )
        return contact_id

    def update_contact(self, contact: Contact) -> None:
        if contact.id == 0:
            raise InvalidArgument("memorydb: contact with unassigned ID passed into update_contact")
        with self._lock:
            stored = self._by_id.get(contact.id)
            if stored is None:
                raise ContactNotFound(contact.id)
            self._by_id[contact.id] = replace(
                contact,
                created_at=stored.created_at,
                last_edited=contact.last_edited or stored.last_edited,
            )

    def delete_contact(self, contact_id: int) -> None:
        if contact_id == 0:
            raise InvalidArgument("memorydb: contact with unassigned ID passed into delete_contact")
        with self._lock:
            if self._by_id.pop(contact_id, None) is None:
                raise ContactNotFound(contact_id)

    def count_contacts(self) -> int:
        with self._lock:
            return len(self._by_id)

    def find_contacts_by_name(self, first_name: str, last_name: str) -> list[Contact]:
        with self._lock:
            return [
                self._by_id[cid]
                for cid in sorted(self._by_id)
                if self._by_id[cid].first_name == first_name
                and self._by_id[cid].last_name == last_name
            ]

    def close(self) -> None:
        pass
