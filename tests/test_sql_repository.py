"""SqlContactRepository specifics, on in-memory and file-backed SQLite."""

import pytest
from sqlalchemy import insert, inspect, select, update
from sqlalchemy.dialects import mysql, sqlite
from sqlalchemy.schema import CreateTable

from yumcontacts.domain import Contact, StorageError, UnexpectedRowCount
from yumcontacts.infrastructure import SqlContactRepository, create_sql_engine
from yumcontacts.infrastructure.persistence.sql_repository import (
    contacts_table,
    ensure_database_exists,
)


def test_table_is_created_on_construction():
    engine = create_sql_engine("sqlite://")
    assert not inspect(engine).has_table("contacts")
    repo = SqlContactRepository(engine)
    assert inspect(engine).has_table("contacts")
    repo.close()


def test_existing_table_and_rows_are_kept(tmp_path):
    url = f"sqlite:///{tmp_path / 'contacts.db'}"
    first = SqlContactRepository.from_url(url)
    contact_id = first.add_contact(Contact(first_name="Ned", last_name="Flanders"))
    first.close()

    second = SqlContactRepository.from_url(url)
    assert second.get_contact(contact_id).first_name == "Ned"
    second.close()


def test_null_columns_read_back_as_empty_strings():
    engine = create_sql_engine("sqlite://")
    repo = SqlContactRepository(engine)
    with engine.begin() as conn:
        result = conn.execute(insert(contacts_table).values(first_name="Moe"))
        contact_id = result.inserted_primary_key[0]

    contact = repo.get_contact(contact_id)
    assert contact.first_name == "Moe"
    assert contact.last_name == ""
    assert contact.phone == ""
    assert contact.created_by_id == ""
    assert contact.created_at is not None
    assert contact.last_edited == contact.created_at
    repo.close()


def test_update_without_edit_stamp_keeps_last_edited():
    repo = SqlContactRepository.from_url("sqlite://")
    contact_id = repo.add_contact(Contact(first_name="Ned", last_name="Flanders"))
    before = repo.get_contact(contact_id)

    repo.update_contact(Contact(id=contact_id, first_name="Ned", last_name="Flanders", phone="1"))
    after = repo.get_contact(contact_id)
    assert after.phone == "1"
    assert after.last_edited == before.last_edited
    repo.close()


def test_unreadable_database_raises_storage_error(tmp_path):
    repo = SqlContactRepository.from_url(f"sqlite:///{tmp_path / 'contacts.db'}")
    repo.close()
    (tmp_path / "contacts.db").unlink()
    (tmp_path / "contacts.db").mkdir()
    with pytest.raises(StorageError):
        repo.list_contacts()


def test_ensure_database_exists_ignores_sqlite(tmp_path):
    ensure_database_exists(f"sqlite:///{tmp_path / 'x.db'}")
    assert not (tmp_path / "x.db").exists()


def test_name_columns_use_binary_collation_on_mysql():
    mysql_ddl = str(CreateTable(contacts_table).compile(dialect=mysql.dialect()))
    assert "first_name VARCHAR(255) COLLATE utf8mb4_bin" in mysql_ddl
    assert "last_name VARCHAR(255) COLLATE utf8mb4_bin" in mysql_ddl
    assert "id BIGINT NOT NULL AUTO_INCREMENT" in mysql_ddl

    sqlite_ddl = str(CreateTable(contacts_table).compile(dialect=sqlite.dialect()))
    assert "COLLATE" not in sqlite_ddl
    assert "id INTEGER NOT NULL" in sqlite_ddl


def test_statement_affecting_two_rows_is_rolled_back():
    engine = create_sql_engine("sqlite://")
    repo = SqlContactRepository(engine)
    first = repo.add_contact(Contact(first_name="Bart", last_name="Simpson", phone="1"))
    repo.add_contact(Contact(first_name="Lisa", last_name="Simpson", phone="2"))
    every_simpson = (
        update(contacts_table)
        .where(contacts_table.c.last_name == "Simpson")
        .values(phone="0")
    )

    with pytest.raises(UnexpectedRowCount) as excinfo:
        repo._exec_affecting_one_row(first, every_simpson, {})
    assert excinfo.value.actual == 2

    with engine.connect() as conn:
        phones = conn.execute(select(contacts_table.c.phone).order_by(contacts_table.c.id)).scalars()
        assert list(phones) == ["1", "2"]
    repo.close()
