import pytest

from extractors.address_book import AddressBook, PersonRecord


@pytest.fixture
def alice() -> PersonRecord:
    return PersonRecord(name="Alice Tan", phone="91234567", email="alice@example.com")


@pytest.fixture
def bob() -> PersonRecord:
    return PersonRecord(
        name="Bob Lee",
        phone="98765432",
        email="bob@example.com",
        tags=frozenset({"friend"}),
    )


@pytest.fixture
def persons(alice, bob):
    return [alice, bob]


@pytest.fixture
def address_book(persons) -> AddressBook:
    return AddressBook(persons)
