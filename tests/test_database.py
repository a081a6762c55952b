from __future__ import annotations

from unittest import mock

import mongomock
import pytest
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from furnishop.database import Database, parse_object_id
from furnishop.errors import MalformedIdentifierError, StorageConnectionError


def test_parse_object_id_accepts_hex() -> None:
    identifier = ObjectId()
    assert parse_object_id(str(identifier)) == identifier
    assert parse_object_id(f"  {identifier}  ") == identifier


@pytest.mark.parametrize("value", [None, "", "   ", "abc", "zzzzzzzzzzzzzzzzzzzzzzzz"])
def test_parse_object_id_rejects_malformed_values(value) -> None:
    with pytest.raises(MalformedIdentifierError):
        parse_object_id(value)


def test_connect_pings_server() -> None:
    with mock.patch("furnishop.database.MongoClient") as client_cls:
        database = Database.connect("mongodb://db:27017", "shop", timeout=2.5)

    client_cls.assert_called_once()
    assert client_cls.call_args.kwargs["serverSelectionTimeoutMS"] == 2500
    client_cls.return_value.admin.command.assert_called_once_with("ping")
    assert database.name == "shop"


def test_connect_failure_is_fatal() -> None:
    with mock.patch("furnishop.database.MongoClient") as client_cls:
        client_cls.return_value.admin.command.side_effect = ServerSelectionTimeoutError("no servers")
        with pytest.raises(StorageConnectionError):
            Database.connect("mongodb://db:27017", "shop", timeout=0.1)


def test_collection_handles_share_one_client() -> None:
    database = Database(mongomock.MongoClient(), "shop")
    database.collection("users").insert_one({"name": "Ann"})

    assert database.collection("users").count_documents({}) == 1


def test_failed_ping_closes_the_client() -> None:
    with mock.patch("furnishop.database.MongoClient") as client_cls:
        client = client_cls.return_value
        client.admin.command.side_effect = ServerSelectionTimeoutError("no servers")
        with pytest.raises(StorageConnectionError):
            Database.connect("mongodb://db:27017", "shop", timeout=0.1)

    client.close.assert_called_once_with()
