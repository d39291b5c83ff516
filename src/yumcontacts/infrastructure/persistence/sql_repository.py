"""Relational implementation of ContactRepository (SQLAlchemy Core).

Table: contacts(id autoincrement PK, text columns for every contact field,
created_at assigned by the server, last_edited). Runs on MySQL in production
and on SQLite locally and in tests.
"""

import logging

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    bindparam,
    create_engine,
    delete,
    func,
    insert,
    inspect,
    select,
    text,
    update,
)
from sqlalchemy.dialects import mysql
from sqlalchemy.engine import Engine, Row, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from yumcontacts.domain import (
    MAX_CONTACT_ID,
    Contact,
    ContactNotFound,
    InvalidArgument,
    StorageError,
    UnexpectedRowCount,
)

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = (
    "first_name",
    "last_name",
    "address",
    "email",
    "phone",
    "created_by",
    "created_by_id",
)

metadata = MetaData()

# SQLite only autoincrements an INTEGER PRIMARY KEY.
_ID_TYPE = BigInteger().with_variant(Integer, "sqlite")
# Name lookups are exact; MySQL compares with a case-insensitive collation by default.
_NAME_TYPE = String(255).with_variant(mysql.VARCHAR(255, collation="utf8mb4_bin"), "mysql")

contacts_table = Table(
    "contacts",
    metadata,
    Column("id", _ID_TYPE, primary_key=True, autoincrement=True),
    Column("first_name", _NAME_TYPE, nullable=True),
    Column("last_name", _NAME_TYPE, nullable=True),
    Column("address", String(255), nullable=True),
    Column("email", String(255), nullable=True),
    Column("phone", Text, nullable=True),
    Column("created_by", String(255), nullable=True),
    Column("created_by_id", String(255), nullable=True),
    Column("created_at", DateTime, server_default=func.current_timestamp()),
    Column("last_edited", DateTime, nullable=True),
)

_c = contacts_table.c

# One statement per operation, built once.
_LIST = select(contacts_table).order_by(_c.last_name, _c.first_name, _c.id)
_LIST_BY = (
    select(contacts_table)
    .where(_c.created_by_id == bindparam("owner_id"))
    .order_by(_c.last_name, _c.first_name, _c.id)
)
_GET = select(contacts_table).where(_c.id == bindparam("contact_id"))
_INSERT = insert(contacts_table)
_UPDATE = (
    update(contacts_table)
    .where(_c.id == bindparam("contact_id"))
    .values(
        {
            **{name: bindparam(f"new_{name}") for name in _EDITABLE_FIELDS},
            "last_edited": func.coalesce(bindparam("edited_at", type_=DateTime), _c.last_edited),
        }
    )
)
_DELETE = delete(contacts_table).where(_c.id == bindparam("contact_id"))
_TALLY = select(func.count()).select_from(contacts_table)
_FIND_BY_NAME = (
    select(contacts_table)
    .where(_c.first_name == bindparam("first"), _c.last_name == bindparam("last"))
    .order_by(_c.id)
)


def _row_to_contact(row: Row) -> Contact:
    """Map a contacts row to a Contact. NULL text columns become ''."""
    m = row._mapping
    created_at = m["created_at"]
    return Contact(
        id=int(m["id"]),
        first_name=m["first_name"] or "",
        last_name=m["last_name"] or "",
        address=m["address"] or "",
        email=m["email"] or "",
        phone=m["phone"] or "",
        created_by=m["created_by"] or "",
        created_by_id=m["created_by_id"] or "",
        created_at=created_at,
        last_edited=m["last_edited"] or created_at,
    )


def _field_params(contact: Contact) -> dict[str, str]:
    return {name: getattr(contact, name) for name in _EDITABLE_FIELDS}


def create_sql_engine(url: str, **kwargs) -> Engine:
    """Create a pooled engine for url. In-memory SQLite shares one connection across threads."""
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:"):
        kwargs.setdefault("poolclass", StaticPool)
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_pre_ping", True)
    return create_engine(parsed, **kwargs)


def ensure_database_exists(url: str) -> None:
    """Create the MySQL database named in url if missing. No-op for other dialects."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "mysql" or not parsed.database:
        return
    server = create_engine(parsed.set(database=None))
    try:
        with server.begin() as conn:
            conn.execute(
                text(
                    f"CREATE DATABASE IF NOT EXISTS `{parsed.database}` "
                    "DEFAULT CHARACTER SET = 'utf8mb4'"
                )
            )
    except SQLAlchemyError as e:
        raise StorageError(f"sql: could not create database {parsed.database}: {e}") from e
    finally:
        server.dispose()


class SqlContactRepository:
    """Stores contacts in a relational database through one pooled Engine.
    The contacts table is created on construction if it does not exist.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._closed = False
        self._ensure_table_exists()

    @classmethod
    def from_url(cls, url: str, **engine_kwargs) -> "SqlContactRepository":
        ensure_database_exists(url)
        return cls(create_sql_engine(url, **engine_kwargs))

    def _ensure_table_exists(self) -> None:
        try:
            if inspect(self._engine).has_table(contacts_table.name):
                return
            logger.info("Creating table %s", contacts_table.name)
            metadata.create_all(self._engine, checkfirst=True)
        except SQLAlchemyError as e:
            raise StorageError(f"sql: could not connect to the database: {e}") from e

    def _query(self, statement, **params) -> list[Contact]:
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(statement, params).fetchall()
        except SQLAlchemyError as e:
            raise StorageError(f"sql: could not run query: {e}") from e
        return [_row_to_contact(row) for row in rows]

    def _exec_affecting_one_row(self, contact_id: int, statement, params: dict) -> None:
        """Execute a mutating statement and require exactly one affected row."""
        try:
            with self._engine.begin() as conn:
                affected = conn.execute(statement, params).rowcount
                # Leaving the block by raising rolls the statement back.
                if affected > 1:
                    raise UnexpectedRowCount(expected=1, actual=affected)
        except SQLAlchemyError as e:
            raise StorageError(f"sql: could not execute statement: {e}") from e
        if affected == 0:
            raise ContactNotFound(contact_id)
        if affected != 1:
            raise UnexpectedRowCount(expected=1, actual=affected)

    def list_contacts(self) -> list[Contact]:
        return self._query(_LIST)

    def list_contacts_created_by(self, user_id: str) -> list[Contact]:
        if not user_id:
            return self.list_contacts()
        return self._query(_LIST_BY, owner_id=user_id)

    def get_contact(self, contact_id: int) -> Contact:
        if contact_id > MAX_CONTACT_ID:
            raise ContactNotFound(contact_id)
        found = self._query(_GET, contact_id=contact_id)
        if not found:
            raise ContactNotFound(contact_id)
        return found[0]

    def add_contact(self, contact: Contact) -> int:
        params = _field_params(contact)
        params["last_edited"] = contact.last_edited
        try:
            with self._engine.begin() as conn:
                result = conn.execute(_INSERT, params)
        except SQLAlchemyError as e:
            raise StorageError(f"sql: could not save contact: {e}") from e
        return int(result.inserted_primary_key[0])

    def update_contact(self, contact: Contact) -> None:
        if contact.id == 0:
            raise InvalidArgument("sql: contact with unassigned ID passed into update_contact")
        params = {f"new_{name}": value for name, value in _field_params(contact).items()}
        params["contact_id"] = contact.id
        params["edited_at"] = contact.last_edited
        self._exec_affecting_one_row(contact.id, _UPDATE, params)

    def delete_contact(self, contact_id: int) -> None:
        if contact_id == 0:
            raise InvalidArgument("sql: contact with unassigned ID passed into delete_contact")
        if contact_id > MAX_CONTACT_ID:
            raise ContactNotFound(contact_id)
        self._exec_affecting_one_row(contact_id, _DELETE, {"contact_id": contact_id})

    def count_contacts(self) -> int:
        try:
            with self._engine.connect() as conn:
                tally = conn.execute(_TALLY).scalar()
        except SQLAlchemyError as e:
            raise StorageError(f"sql: could not tally contacts: {e}") from e
        return int(tally or 0)

    def find_contacts_by_name(self, first_name: str, last_name: str) -> list[Contact]:
        return self._query(_FIND_BY_NAME, first=first_name, last=last_name)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._engine.dispose()
