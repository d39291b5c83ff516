"""Neo4j implementation of ContactRepository.
Graph: one (:Contact) node per contact; ids come from a (:ContactSequence {name: 'contacts'})
counter node that is incremented in the same write that creates the contact.
Timestamps are stored as ISO-8601 strings.
"""

from datetime import datetime, timezone

from neo4j.exceptions import DriverError, Neo4jError

from yumcontacts.domain import (
    MAX_CONTACT_ID,
    Contact,
    ContactNotFound,
    InvalidArgument,
    StorageError,
    UnexpectedRowCount,
)

SEQUENCE_NAME = "contacts"

_CONSTRAINT_QUERY = """
CREATE CONSTRAINT contact_id_unique IF NOT EXISTS
FOR (c:Contact) REQUIRE c.id IS UNIQUE
"""

_SEQUENCE_CONSTRAINT_QUERY = """
CREATE CONSTRAINT contact_sequence_name_unique IF NOT EXISTS
FOR (s:ContactSequence) REQUIRE s.name IS UNIQUE
"""

_LIST_QUERY = """
MATCH (c:Contact)
RETURN c
ORDER BY c.last_name, c.first_name, c.id
"""

_LIST_BY_QUERY = """
MATCH (c:Contact)
WHERE c.created_by_id = $user_id
RETURN c
ORDER BY c.last_name, c.first_name, c.id
"""

_GET_QUERY = """
MATCH (c:Contact {id: $id})
RETURN c
"""

_ADD_QUERY = """
MERGE (seq:ContactSequence {name: $sequence})
ON CREATE SET seq.value = 0
SET seq.value = seq.value + 1
CREATE (c:Contact {
    id: seq.value,
    first_name: $first_name,
    last_name: $last_name,
    address: $address,
    email: $email,
    phone: $phone,
    created_by: $created_by,
    created_by_id: $created_by_id,
    created_at: $created_at,
    last_edited: $last_edited
})
RETURN c.id AS id
"""

_UPDATE_QUERY = """
MATCH (c:Contact {id: $id})
SET c.first_name = $first_name,
    c.last_name = $last_name,
    c.address = $address,
    c.email = $email,
    c.phone = $phone,
    c.created_by = $created_by,
    c.created_by_id = $created_by_id,
    c.last_edited = coalesce($last_edited, c.last_edited)
RETURN count(c) AS affected
"""

# Collect first so the matched count survives the delete.
_DELETE_QUERY = """
MATCH (c:Contact {id: $id})
WITH collect(c) AS matched
FOREACH (n IN matched | DETACH DELETE n)
RETURN size(matched) AS affected
"""

_TALLY_QUERY = """
MATCH (c:Contact)
RETURN count(c) AS tally
"""

_FIND_BY_NAME_QUERY = """
MATCH (c:Contact)
WHERE c.first_name = $first_name AND c.last_name = $last_name
RETURN c
ORDER BY c.id
"""


def _datetime_to_iso(dt: datetime | None) -> str | None:
    return dt.isoformat() if dt is not None else None


def _iso_to_datetime(s: str | None) -> datetime | None:
    if not s:
        return None
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def ensure_contact_constraint(driver) -> None:
    """Create unique constraints on Contact(id) and ContactSequence(name) if missing."""
    with driver.session() as session:
        session.run(_CONSTRAINT_QUERY)
        session.run(_SEQUENCE_CONSTRAINT_QUERY)


class Neo4jContactRepository:
    """Stores contacts as Contact nodes in Neo4j.
    The driver's session pool handles concurrent callers.
    """

    def __init__(self, driver, *, owns_driver: bool = False) -> None:
        self._driver = driver
        self._owns_driver = owns_driver
        self._closed = False
        try:
            ensure_contact_constraint(driver)
        except (Neo4jError, DriverError) as e:
            raise StorageError(f"neo4j: could not prepare the database: {e}") from e

    def _run(self, query: str, **params) -> list:
        try:
            with self._driver.session() as session:
                return list(session.run(query, **params))
        except (Neo4jError, DriverError) as e:
            raise StorageError(f"neo4j: query failed: {e}") from e

    def _run_affecting_one(self, contact_id: int, query: str, **params) -> None:
        records = self._run(query, id=contact_id, **params)
        affected = records[0]["affected"] if records else 0
        if affected == 0:
            raise ContactNotFound(contact_id)
        if affected != 1:
            raise UnexpectedRowCount(expected=1, actual=affected)

    def list_contacts(self) -> list[Contact]:
        return [_record_to_contact(rec) for rec in self._run(_LIST_QUERY)]

    def list_contacts_created_by(self, user_id: str) -> list[Contact]:
        if not user_id:
            return self.list_contacts()
        return [_record_to_contact(rec) for rec in self._run(_LIST_BY_QUERY, user_id=user_id)]

    def get_contact(self, contact_id: int) -> Contact:
        if contact_id > MAX_CONTACT_ID:
            raise ContactNotFound(contact_id)
        records = self._run(_GET_QUERY, id=contact_id)
        if not records:
            raise ContactNotFound(contact_id)
        return _record_to_contact(records[0])

    def add_contact(self, contact: Contact) -> int:
        created_at = datetime.now(timezone.utc)
        records = self._run(
            _ADD_QUERY,
            sequence=SEQUENCE_NAME,
            first_name=contact.first_name,
            last_name=contact.last_name,
            address=contact.address,
            email=contact.email,
            phone=contact.phone,
            created_by=contact.created_by,
            created_by_id=contact.created_by_id,
            created_at=_datetime_to_iso(created_at),
            last_edited=_datetime_to_iso(contact.last_edited or created_at),
        )
        if not records:
            raise StorageError("neo4j: could not save contact")
        return int(records[0]["id"])

    def update_contact(self, contact: Contact) -> None:
        if contact.id == 0:
            raise InvalidArgument("neo4j: contact with unassigned ID passed into update_contact")
        self._run_affecting_one(
            contact.id,
            _UPDATE_QUERY,
            first_name=contact.first_name,
            last_name=contact.last_name,
            address=contact.address,
            email=contact.email,
            phone=contact.phone,
            created_by=contact.created_by,
            created_by_id=contact.created_by_id,
            last_edited=_datetime_to_iso(contact.last_edited),
        )

    def delete_contact(self, contact_id: int) -> None:
        if contact_id == 0:
            raise InvalidArgument("neo4j: contact with unassigned ID passed into delete_contact")
        if contact_id > MAX_CONTACT_ID:
            raise ContactNotFound(contact_id)
        self._run_affecting_one(contact_id, _DELETE_QUERY)

    def count_contacts(self) -> int:
        records = self._run(_TALLY_QUERY)
        return int(records[0]["tally"]) if records else 0

    def find_contacts_by_name(self, first_name: str, last_name: str) -> list[Contact]:
        records = self._run(_FIND_BY_NAME_QUERY, first_name=first_name, last_name=last_name)
        return [_record_to_contact(rec) for rec in records]

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_driver:
            self._driver.close()


def _record_to_contact(record) -> Contact:
    c = record["c"]
    created_at = _iso_to_datetime(c.get("created_at"))
    return Contact(
        id=int(c["id"]),
        first_name=c.get("first_name") or "",
        last_name=c.get("last_name") or "",
        address=c.get("address") or "",
        email=c.get("email") or "",
        phone=c.get("phone") or "",
        created_by=c.get("created_by") or "",
        created_by_id=c.get("created_by_id") or "",
        created_at=created_at,
        last_edited=_iso_to_datetime(c.get("last_edited")) or created_at,
    )
