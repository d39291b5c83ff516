"""Contact list, detail, create, update, delete. Used by the HTTP handlers and the assistant."""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone

from yumcontacts.application.dto import ContactForm, UserProfile
from yumcontacts.application.ports import ContactRepository
from yumcontacts.domain import Contact, InvalidArgument

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContactService:
    """Applies creator provenance and edit stamps on top of a ContactRepository."""

    def __init__(
        self,
        repository: ContactRepository,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repo = repository
        self._clock = clock

    @property
    def repository(self) -> ContactRepository:
        return self._repo

    def list_contacts(self) -> list[Contact]:
        return self._repo.list_contacts()

    def list_contacts_created_by(self, user_id: str) -> list[Contact]:
        return self._repo.list_contacts_created_by(user_id)

    def get_contact(self, contact_id: int) -> Contact:
        return self._repo.get_contact(contact_id)

    def contact_from_form(
        self, form: ContactForm, user: UserProfile | None, contact_id: int = 0
    ) -> Contact:
        """Build a Contact from form values.

        If the form didn't carry the creator, take it from the signed-in user,
        or mark the contact as created anonymously.
        """
        contact = Contact(
            id=contact_id,
            first_name=form.first_name.strip(),
            last_name=form.last_name.strip(),
            address=form.address.strip(),
            email=form.email.strip(),
            phone=form.phone.strip(),
            created_by=form.created_by.strip(),
            created_by_id=form.created_by_id.strip(),
        )
        if contact.created_by_id:
            return contact
        if user is not None:
            return replace(contact, created_by=user.display_name, created_by_id=user.id)
        return contact.with_anonymous_creator()

    def create_contact(self, form: ContactForm, user: UserProfile | None = None) -> int:
        """Store a new contact from the form. Returns the backend-assigned id."""
        return self.add_contact(self.contact_from_form(form, user))

    def add_contact(self, contact: Contact) -> int:
        contact_id = self._repo.add_contact(contact)
        logger.info("Created contact %d (%s)", contact_id, contact.full_name)
        return contact_id

    def update_contact(
        self, contact_id: int, form: ContactForm, user: UserProfile | None = None
    ) -> Contact:
        """Overwrite an existing contact with the form values and stamp last_edited."""
        if contact_id <= 0:
            raise InvalidArgument("contact with unassigned ID passed into update_contact")
        contact = replace(
            self.contact_from_form(form, user, contact_id=contact_id),
            last_edited=self._clock(),
        )
        self._repo.update_contact(contact)
        logger.info("Updated contact %d", contact_id)
        return contact

    def edit_contact(self, contact: Contact) -> Contact:
        """Persist changes made to an already loaded contact and stamp last_edited."""
        edited = replace(contact, last_edited=self._clock())
        self._repo.update_contact(edited)
        logger.info("Updated contact %d", contact.id)
        return edited

    def delete_contact(self, contact_id: int) -> None:
        if contact_id <= 0:
            raise InvalidArgument("contact with unassigned ID passed into delete_contact")
        self._repo.delete_contact(contact_id)
        logger.info("Deleted contact %d", contact_id)

    def tally(self) -> int:
        return self._repo.count_contacts()

    def find_by_name(self, first_name: str, last_name: str) -> list[Contact]:
        """Return every contact with exactly this first and last name."""
        return self._repo.find_contacts_by_name(first_name, last_name)
