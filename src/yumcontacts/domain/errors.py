"""Errors raised by contact storage and the assistant webhook."""


class ContactError(Exception):
    """Base class for every contact-related failure."""


class ContactNotFound(ContactError):
    def __init__(self, contact_id: int) -> None:
        super().__init__(f"could not find contact with id {contact_id}")
        self.contact_id = contact_id


class InvalidArgument(ContactError):
    """Unassigned id passed to update/delete, or a malformed request parameter."""


class UnexpectedRowCount(ContactError):
    """A mutating statement affected a number of records other than one."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"expected {expected} row affected, got {actual}")
        self.expected = expected
        self.actual = actual


class StorageError(ContactError):
    """The storage medium is unreachable or a query failed."""


class PayloadError(ContactError):
    """Inbound webhook payload could not be decoded."""
