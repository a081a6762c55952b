from __future__ import annotations

from datetime import datetime

import mongomock
import pytest
from bson import ObjectId

from furnishop.errors import NotFoundError
from furnishop.users import UserRepository, current_timestamp, document_to_user


@pytest.fixture()
def collection() -> mongomock.Collection:
    return mongomock.MongoClient()["furnitureShopDB"]["users"]


@pytest.fixture()
def users(collection: mongomock.Collection) -> UserRepository:
    return UserRepository(collection)


def test_current_timestamp_has_millisecond_precision() -> None:
    stamp = current_timestamp()
    assert stamp.microsecond % 1000 == 0
    assert stamp.utcoffset() is not None


def test_create_assigns_identifier_and_timestamps(users: UserRepository) -> None:
    user_id = users.create("Ann", "ann@x.com")

    user = users.get(user_id)
    assert user is not None
    assert user.id == user_id
    assert user.age == 0
    assert user.version == 1
    assert user.created_at == user.updated_at


def test_get_missing_user_returns_none(users: UserRepository) -> None:
    assert users.get(ObjectId()) is None


def test_update_missing_user_raises(users: UserRepository) -> None:
    with pytest.raises(NotFoundError):
        users.update_name(ObjectId(), "Ghost")


def test_update_refreshes_updated_at_only(users: UserRepository) -> None:
    user_id = users.create("Ann", "ann@x.com", age=30)
    original = users.get(user_id)

    users.update_name(user_id, "Anne")

    updated = users.get(user_id)
    assert updated.name == "Anne"
    assert updated.age == 30
    assert updated.created_at == original.created_at
    assert updated.updated_at >= original.updated_at


def test_delete_reports_whether_anything_was_removed(users: UserRepository) -> None:
    user_id = users.create("Ann", "ann@x.com")

    assert users.delete(user_id) is True
    assert users.delete(user_id) is False
    assert users.get(user_id) is None


def test_list_all_skips_undecodable_documents(users: UserRepository, collection) -> None:
    users.create("Ann", "ann@x.com")
    collection.insert_one({"name": "Broken", "email": "broken@x.com"})
    collection.insert_one({"name": "Odd", "email": "odd@x.com", "created_at": "yesterday", "updated_at": "today"})

    listed = users.list_all()

    assert [user.name for user in listed] == ["Ann"]


def test_document_without_age_decodes_with_default() -> None:
    now = datetime(2024, 5, 1, 12, 0, 0)
    user = document_to_user(
        {"_id": ObjectId(), "name": "Old", "email": "old@x.com", "created_at": now, "updated_at": now}
    )
    assert user.age == 0
    assert user.version == 0
    assert user.created_at.utcoffset() is not None
