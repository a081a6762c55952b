from __future__ import annotations

from unittest import mock

import mongomock
import pytest
from pymongo.errors import PyMongoError

from furnishop.errors import MigrationError
from furnishop.migrations import (
    MIGRATIONS,
    SAMPLE_USER_EMAIL,
    Migration,
    backfill_age,
    run_migrations,
    seed_sample_user,
)


@pytest.fixture()
def collection() -> mongomock.Collection:
    return mongomock.MongoClient()["furnitureShopDB"]["users"]


def test_migrations_run_in_declared_order() -> None:
    assert [migration.name for migration in MIGRATIONS] == ["seed_sample_user", "backfill_age"]


def test_seed_inserts_sample_user_once(collection) -> None:
    run_migrations(collection)
    results = run_migrations(collection)

    assert collection.count_documents({}) == 1
    sample = collection.find_one({})
    assert sample["email"] == SAMPLE_USER_EMAIL
    assert sample["version"] == 1
    assert sample["created_at"] == sample["updated_at"]
    assert "not inserted" in results[0].detail


def test_seed_skips_populated_collection(collection) -> None:
    collection.insert_one({"name": "Existing", "email": "existing@x.com"})

    seed_sample_user(collection)

    assert collection.count_documents({"email": SAMPLE_USER_EMAIL}) == 0


def test_backfill_overwrites_every_age(collection) -> None:
    collection.insert_many(
        [
            {"name": "No age", "email": "a@x.com"},
            {"name": "Has age", "email": "b@x.com", "age": 52},
        ]
    )

    detail = backfill_age(collection)

    assert [document["age"] for document in collection.find({})] == [0, 0]
    assert "2 of 2" in detail


def test_run_migrations_returns_one_result_per_step(collection) -> None:
    results = run_migrations(collection)

    assert [result.name for result in results] == ["seed_sample_user", "backfill_age"]
    assert collection.find_one({})["age"] == 0


def test_failure_stops_the_pipeline(collection) -> None:
    later = mock.Mock(return_value="ran")
    failing = Migration("explode", mock.Mock(side_effect=PyMongoError("write concern")))

    with pytest.raises(MigrationError) as excinfo:
        run_migrations(collection, [failing, Migration("later", later)])

    assert excinfo.value.step == "explode"
    assert isinstance(excinfo.value.__cause__, PyMongoError)
    later.assert_not_called()


def test_backfill_failure_is_reported(collection) -> None:
    with mock.patch.object(mongomock.Collection, "update_many", side_effect=PyMongoError("boom")):
        with pytest.raises(MigrationError) as excinfo:
            run_migrations(collection)

    assert excinfo.value.step == "backfill_age"
