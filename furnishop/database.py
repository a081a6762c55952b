"""MongoDB-backed storage gateway shared by the API and the migrations."""
from __future__ import annotations

import logging
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from .errors import MalformedIdentifierError, StorageConnectionError

logger = logging.getLogger("furnishop.database")

DEFAULT_CONNECT_TIMEOUT = 10.0


def parse_object_id(value: Optional[str]) -> ObjectId:
    """Parse a 24 character hex identifier into an :class:`ObjectId`."""

    if value is None or not value.strip():
        raise MalformedIdentifierError("Query parameter 'id' is required")
    try:
        return ObjectId(value.strip())
    except (InvalidId, TypeError) as exc:
        raise MalformedIdentifierError(f"'{value}' is not a valid user identifier") from exc


class Database:
    """Thin wrapper around a single :class:`MongoClient` and its database."""

    def __init__(self, client: MongoClient, database_name: str) -> None:
        self._client = client
        self._database_name = database_name
        self._database = client[database_name]

    @classmethod
    def connect(
        cls,
        uri: str,
        database_name: str,
        *,
        timeout: float = DEFAULT_CONNECT_TIMEOUT,
        **client_options: Any,
    ) -> "Database":
        """Open a client and verify the server answers a ``ping`` within ``timeout``."""

        timeout_ms = int(timeout * 1000)
        try:
            client: MongoClient = MongoClient(
                uri,
                serverSelectionTimeoutMS=timeout_ms,
                connectTimeoutMS=timeout_ms,
                tz_aware=True,
                **client_options,
            )
        except PyMongoError as exc:
            raise StorageConnectionError(f"Invalid MongoDB client settings for {uri}: {exc}") from exc

        try:
            client.admin.command("ping")
        except PyMongoError as exc:
            client.close()
            raise StorageConnectionError(f"Unable to reach MongoDB at {uri}: {exc}") from exc

        logger.info("Connected to MongoDB at %s (database %s)", uri, database_name)
        return cls(client, database_name)

    @property
    def name(self) -> str:
        return self._database_name

    def collection(self, name: str) -> Collection:
        return self._database[name]

    def close(self) -> None:
        self._client.close()


__all__ = ["DEFAULT_CONNECT_TIMEOUT", "Database", "parse_object_id"]
