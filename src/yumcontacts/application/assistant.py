"""Assistant fulfillment: answer intent-tagged requests about contacts.

The dispatcher is state-free. Each intent handler fills an AssistantMessage;
storage errors are reported in the speech and re-raised so the caller can
answer with an error status.
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone

from yumcontacts.application.contact_service import ContactService
from yumcontacts.application.dto import AssistantContact, AssistantMessage, AssistantRequest
from yumcontacts.domain import Contact, ContactError

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "yum-contacts assistant webhook"

INTENT_NUMBER_OF_CONTACTS = "number_of_contacts"
INTENT_FIND_CONTACT = "find_contact"
INTENT_ADD_CONTACT = "add_contact"
INTENT_UPDATE_CONTACT = "update_contact"
INTENT_DELETE_CONTACT = "delete_contact"

# Parameter names used by the assistant agent's entities.
PARAM_GIVEN_NAME = "given-name"
PARAM_LAST_NAME = "last-name"
PARAM_ADDRESS = "address"
PARAM_EMAIL = "email"
PARAM_PHONE = "phone-number"

PhoneFormatter = Callable[[str], str]


def extract_contact(request: AssistantRequest) -> AssistantContact:
    """Project the request parameters onto contact fields. Missing parameters become ''."""
    params = request.parameters or {}

    def _param(name: str) -> str:
        return (params.get(name) or "").strip()

    return AssistantContact(
        given_name=_param(PARAM_GIVEN_NAME),
        last_name=_param(PARAM_LAST_NAME),
        address=_param(PARAM_ADDRESS),
        email=_param(PARAM_EMAIL),
        phone=_param(PARAM_PHONE),
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AssistantDispatcher:
    """Routes an AssistantRequest to the handler for its intent."""

    def __init__(
        self,
        service: ContactService,
        *,
        source: str = DEFAULT_SOURCE,
        format_phone: PhoneFormatter | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._service = service
        self._source = source
        self._format_phone = format_phone or (lambda raw: raw)
        self._clock = clock
        self._handlers: dict[str, Callable[[AssistantRequest, AssistantMessage], None]] = {
            INTENT_NUMBER_OF_CONTACTS: self._tally_contacts,
            INTENT_FIND_CONTACT: self._find_contact,
            INTENT_ADD_CONTACT: self._add_contact,
            INTENT_UPDATE_CONTACT: self._update_contact,
            INTENT_DELETE_CONTACT: self._delete_contact,
        }

    def dispatch(self, request: AssistantRequest) -> AssistantMessage:
        message = AssistantMessage(
            speech="Unprocessed Speech value",
            display_text="Unprocessed DisplayText value",
            source=self._source,
        )
        logger.info("Contact params: %s", extract_contact(request))
        handler = self._handlers.get(request.intent_name, self._unhandled_intent)
        try:
            handler(request, message)
        except ContactError as e:
            _say(message, f"Error: processing of intent {request.intent_name} failed, {e}")
            raise
        return message

    def _now(self) -> str:
        return self._clock().isoformat(timespec="seconds")

    def _tally_contacts(self, request: AssistantRequest, message: AssistantMessage) -> None:
        tally = self._service.tally()
        _say(message, f"Tally {tally} for contacts as of {self._now()}")

    def _find_contact(self, request: AssistantRequest, message: AssistantMessage) -> None:
        wanted = extract_contact(request)
        found = self._service.find_by_name(wanted.given_name, wanted.last_name)
        if not found:
            _say(message, _not_found_speech(wanted))
            return
        first = found[0]
        speech = (
            f"Found: {first.first_name} {first.last_name} at address: {first.address}, "
            f"with phone number: {self._format_phone(first.phone)} and email: {first.email}"
        )
        if len(found) > 1:
            speech += f" ({len(found) - 1} more with the same name)"
        _say(message, speech)

    def _add_contact(self, request: AssistantRequest, message: AssistantMessage) -> None:
        wanted = extract_contact(request)
        if not wanted.given_name and not wanted.last_name:
            _say(message, "I need at least a first or last name to add a contact.")
            return
        contact = Contact(
            first_name=wanted.given_name,
            last_name=wanted.last_name,
            address=wanted.address,
            email=wanted.email,
            phone=wanted.phone,
        ).with_anonymous_creator()
        contact_id = self._service.add_contact(contact)
        _say(message, f"Added {wanted.display_name} (contact {contact_id})")

    def _update_contact(self, request: AssistantRequest, message: AssistantMessage) -> None:
        wanted = extract_contact(request)
        found = self._service.find_by_name(wanted.given_name, wanted.last_name)
        if not found:
            _say(message, _not_found_speech(wanted))
            return
        contact = found[0]
        changes = {
            name: value
            for name, value in (
                ("address", wanted.address),
                ("email", wanted.email),
                ("phone", wanted.phone),
            )
            if value
        }
        if not changes:
            _say(message, f"Nothing to update for {contact.full_name}.")
            return
        self._service.edit_contact(replace(contact, **changes))
        _say(message, f"Updated {', '.join(sorted(changes))} for {contact.full_name}")

    def _delete_contact(self, request: AssistantRequest, message: AssistantMessage) -> None:
        wanted = extract_contact(request)
        found = self._service.find_by_name(wanted.given_name, wanted.last_name)
        if not found:
            _say(message, _not_found_speech(wanted))
            return
        contact = found[0]
        self._service.delete_contact(contact.id)
        _say(message, f"Deleted {contact.full_name}")

    def _unhandled_intent(self, request: AssistantRequest, message: AssistantMessage) -> None:
        tally = self._service.tally()
        _say(
            message,
            f"Sorry, I can't help with '{request.intent_name}' yet. "
            f"You have {tally} contacts as of {self._now()}",
        )


def _say(message: AssistantMessage, speech: str) -> None:
    message.speech = speech
    message.display_text = speech


def _not_found_speech(wanted: AssistantContact) -> str:
    return f"No contact found for first name {wanted.given_name}, last name: {wanted.last_name}"
