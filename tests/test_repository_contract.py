"""Behaviour every ContactRepository must share. Runs against the in-memory and SQLite backends."""

from dataclasses import replace

import pytest

from yumcontacts.domain import (
    ANONYMOUS_CREATOR_ID,
    Contact,
    ContactNotFound,
    InvalidArgument,
)
from yumcontacts.infrastructure import InMemoryContactRepository, SqlContactRepository


@pytest.fixture(params=["memory", "sqlite"])
def repo(request):
    if request.param == "memory":
        repository = InMemoryContactRepository()
    else:
        repository = SqlContactRepository.from_url("sqlite://")
    try:
        yield repository
    finally:
        repository.close()


def _homer() -> Contact:
    return Contact(
        first_name="Homer",
        last_name="Simpson",
        address="742 Evergreen Terrace, Springfield",
        email="homer.simpson@simpsons.guru",
        phone="555-123-4567",
        created_by="Marge",
        created_by_id="user-marge",
    )


def test_empty_store_lists_nothing(repo):
    assert repo.list_contacts() == []
    assert repo.count_contacts() == 0


def test_add_then_get_round_trip(repo):
    homer = _homer()
    contact_id = repo.add_contact(homer)
    assert contact_id > 0

    found = repo.get_contact(contact_id)
    assert found == replace(homer, id=contact_id)
    assert found.created_at is not None
    assert found.last_edited is not None


def test_add_ignores_input_id(repo):
    first = repo.add_contact(replace(_homer(), id=99))
    second = repo.add_contact(replace(_homer(), id=99))
    assert first != second
    assert repo.get_contact(first).id == first


def test_homer_scenario(repo):
    contact_id = repo.add_contact(_homer())
    stored = repo.get_contact(contact_id)

    repo.update_contact(replace(stored, phone="555-0000"))
    assert repo.get_contact(contact_id).phone == "555-0000"

    repo.delete_contact(contact_id)
    with pytest.raises(ContactNotFound):
        repo.get_contact(contact_id)
    assert all(c.id != contact_id for c in repo.list_contacts())


def test_update_with_unchanged_values_keeps_record(repo):
    contact_id = repo.add_contact(_homer())
    before = repo.get_contact(contact_id)
    repo.update_contact(before)
    after = repo.get_contact(contact_id)
    assert after == before
    assert after.created_at == before.created_at
    assert after.last_edited == before.last_edited


def test_update_overwrites_provenance_and_keeps_created_at(repo):
    contact_id = repo.add_contact(_homer())
    before = repo.get_contact(contact_id)
    repo.update_contact(replace(before, created_by="Bart", created_by_id="user-bart"))
    after = repo.get_contact(contact_id)
    assert after.created_by == "Bart"
    assert after.created_by_id == "user-bart"
    assert after.created_at == before.created_at


def test_list_is_ordered_by_last_then_first_name(repo):
    for first, last in [
        ("Lisa", "Simpson"),
        ("Ned", "Flanders"),
        ("Bart", "Simpson"),
        ("Maude", "Flanders"),
    ]:
        repo.add_contact(Contact(first_name=first, last_name=last))

    names = [(c.last_name, c.first_name) for c in repo.list_contacts()]
    assert names == [
        ("Flanders", "Maude"),
        ("Flanders", "Ned"),
        ("Simpson", "Bart"),
        ("Simpson", "Lisa"),
    ]


def test_list_created_by_filters_on_creator_id(repo):
    repo.add_contact(_homer())
    repo.add_contact(Contact(first_name="Ned", last_name="Flanders", created_by_id="user-ned"))
    repo.add_contact(Contact(first_name="Moe", last_name="Szyslak").with_anonymous_creator())

    mine = repo.list_contacts_created_by("user-ned")
    assert [c.first_name for c in mine] == ["Ned"]

    anonymous = repo.list_contacts_created_by(ANONYMOUS_CREATOR_ID)
    assert [c.first_name for c in anonymous] == ["Moe"]

    assert repo.list_contacts_created_by("nobody") == []


def test_list_created_by_empty_means_no_filter(repo):
    repo.add_contact(_homer())
    repo.add_contact(Contact(first_name="Ned", last_name="Flanders", created_by_id="user-ned"))
    assert repo.list_contacts_created_by("") == repo.list_contacts()


def test_get_missing_raises_not_found(repo):
    with pytest.raises(ContactNotFound):
        repo.get_contact(12345)


def test_update_and_delete_require_assigned_id(repo):
    repo.add_contact(_homer())
    with pytest.raises(InvalidArgument):
        repo.update_contact(_homer())
    with pytest.raises(InvalidArgument):
        repo.delete_contact(0)
    assert repo.count_contacts() == 1


def test_update_and_delete_missing_id_fail(repo):
    with pytest.raises(ContactNotFound):
        repo.update_contact(replace(_homer(), id=404))
    with pytest.raises(ContactNotFound):
        repo.delete_contact(404)


def test_delete_twice_fails_second_time(repo):
    contact_id = repo.add_contact(_homer())
    repo.delete_contact(contact_id)
    with pytest.raises(ContactNotFound):
        repo.delete_contact(contact_id)


def test_count(repo):
    repo.add_contact(_homer())
    repo.add_contact(Contact(first_name="Ned", last_name="Flanders"))
    assert repo.count_contacts() == 2


def test_find_by_name_is_exact_and_returns_all_matches(repo):
    first = repo.add_contact(_homer())
    second = repo.add_contact(replace(_homer(), address="Somewhere else"))
    repo.add_contact(Contact(first_name="Homer", last_name="Simpsons"))

    found = repo.find_contacts_by_name("Homer", "Simpson")
    assert [c.id for c in found] == [first, second]

    assert repo.find_contacts_by_name("Marge", "Simpson") == []


def test_find_by_name_is_case_sensitive(repo):
    repo.add_contact(_homer())
    assert repo.find_contacts_by_name("homer", "simpson") == []


def test_close_is_idempotent(repo):
    repo.close()
    repo.close()


def test_ids_beyond_64_bits_are_not_found(repo):
    repo.add_contact(_homer())
    with pytest.raises(ContactNotFound):
        repo.get_contact(10**20)
    with pytest.raises(ContactNotFound):
        repo.delete_contact(10**20)
    assert repo.count_contacts() == 1
