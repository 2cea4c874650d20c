import pytest

from exceptions import DuplicateDocumentError, InvalidReferenceError, StorageError
from repositories.document_repository import ASCENDING, DESCENDING
from repositories.references import normalize_reference, stringify_reference


def test_normalize_reference_accepts_native_and_string_forms():
    assert normalize_reference(12) == 12
    assert normalize_reference("12") == 12
    assert normalize_reference(" 7 ") == 7
    assert normalize_reference(None) is None
    assert normalize_reference("") is None


@pytest.mark.parametrize("value", ["abc", "1.5", True, 2.0, [1]])
def test_normalize_reference_rejects_other_values(value):
    with pytest.raises(InvalidReferenceError):
        normalize_reference(value, "tenant_id")


def test_stringify_reference():
    assert stringify_reference(5) == "5"
    assert stringify_reference(None) is None


def test_repository_matches_string_and_native_identities(repository, make_user):
    user_id = make_user()

    by_int = repository.find_one("users", {"_id": user_id})
    by_str = repository.find_one("users", {"_id": str(user_id)})

    assert by_int == by_str
    assert by_int["_id"] == user_id
    assert by_int["first_name"] == "Jane"


def test_repository_membership_filter_and_sort(repository, make_user):
    first = make_user(first_name="Ann")
    second = make_user(first_name="Bob")
    make_user(first_name="Cat")

    found = repository.find("users", {"_id": {"$in": [str(first), second]}}, sort=[("_id", DESCENDING)])
    assert [doc["first_name"] for doc in found] == ["Bob", "Ann"]

    everyone = repository.find("users", sort=[("first_name", ASCENDING)])
    assert [doc["first_name"] for doc in everyone] == ["Ann", "Bob", "Cat"]


def test_repository_update_and_delete_report_matches(repository, make_user):
    user_id = make_user()

    assert repository.update_one("users", {"_id": user_id}, {"last_name": "Smith"}) == 1
    assert repository.find_one("users", {"_id": user_id})["last_name"] == "Smith"
    assert repository.update_one("users", {"_id": 999}, {"last_name": "Nobody"}) == 0

    assert repository.delete_one("users", {"_id": user_id}) == 1
    assert repository.delete_one("users", {"_id": user_id}) == 0


def test_repository_maps_unique_violation(repository):
    document = {"email": "dup@example.com", "first_name": "A", "last_name": "B", "role": "tenant"}
    repository.insert_one("users", document)

    with pytest.raises(DuplicateDocumentError):
        repository.insert_one("users", dict(document))


def test_repository_rejects_unknown_collection_and_field(repository):
    with pytest.raises(StorageError):
        repository.find("payments")
    with pytest.raises(StorageError):
        repository.find("users", {"nickname": "x"})
