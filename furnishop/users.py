"""Repository for user documents.

Every method issues exactly one storage call against the shared collection
handle. Driver failures surface as :class:`StoreError`; a document that does
not exist is reported separately so callers can tell the two apart.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from bson import ObjectId
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from .errors import NotFoundError, StoreError
from .models import User

logger = logging.getLogger("furnishop.users")

CURRENT_VERSION = 1


def current_timestamp() -> datetime:
    """Return the current UTC time at the millisecond precision BSON stores."""

    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond - now.microsecond % 1000)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def document_to_user(document: Mapping[str, Any]) -> User:
    """Decode a raw document, raising ``ValueError`` when it does not fit the schema."""

    try:
        identifier = document["_id"]
        name = document["name"]
        email = document["email"]
        created_at = document["created_at"]
        updated_at = document["updated_at"]
    except KeyError as exc:
        raise ValueError(f"missing field {exc.args[0]!r}") from exc

    if not isinstance(identifier, ObjectId):
        raise ValueError("_id is not an ObjectId")
    if not isinstance(name, str) or not isinstance(email, str):
        raise ValueError("name and email must be strings")
    if not isinstance(created_at, datetime) or not isinstance(updated_at, datetime):
        raise ValueError("timestamps must be datetimes")

    age = document.get("age", 0)
    version = document.get("version", 0)
    if isinstance(age, bool) or not isinstance(age, int):
        raise ValueError("age must be an integer")
    if isinstance(version, bool) or not isinstance(version, int):
        raise ValueError("version must be an integer")

    return User(
        id=identifier,
        name=name,
        email=email,
        age=age,
        created_at=_as_utc(created_at),
        updated_at=_as_utc(updated_at),
        version=version,
    )


def new_user_document(name: str, email: str, *, age: int = 0) -> Dict[str, Any]:
    created_at = current_timestamp()
    return {
        "name": name,
        "email": email,
        "age": age,
        "created_at": created_at,
        "updated_at": created_at,
        "version": CURRENT_VERSION,
    }


class UserRepository:
    """CRUD operations over the ``users`` collection."""

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    def create(self, name: str, email: str, *, age: int = 0) -> ObjectId:
        document = new_user_document(name, email, age=age)
        try:
            result = self._collection.insert_one(document)
        except PyMongoError as exc:
            logger.warning("Failed to insert user %s: %s", email, exc)
            raise StoreError(f"Failed to create user: {exc}") from exc

        logger.info("Created user %s", result.inserted_id)
        return result.inserted_id

    def get(self, user_id: ObjectId) -> Optional[User]:
        try:
            document = self._collection.find_one({"_id": user_id})
        except PyMongoError as exc:
            logger.warning("Lookup of user %s failed: %s", user_id, exc)
            raise StoreError(f"Failed to load user: {exc}") from exc

        if document is None:
            return None
        try:
            return document_to_user(document)
        except ValueError as exc:
            raise StoreError(f"Stored user {user_id} could not be decoded: {exc}") from exc

    def update_name(self, user_id: ObjectId, name: str) -> None:
        """Set a new name and refresh ``updated_at``; other fields are untouched."""

        try:
            result = self._collection.update_one(
                {"_id": user_id},
                {"$set": {"name": name, "updated_at": current_timestamp()}},
            )
        except PyMongoError as exc:
            logger.warning("Update of user %s failed: %s", user_id, exc)
            raise StoreError(f"Failed to update user: {exc}") from exc

        if result.matched_count == 0:
            raise NotFoundError(f"User {user_id} not found")
        logger.info("Renamed user %s", user_id)

    def delete(self, user_id: ObjectId) -> bool:
        try:
            result = self._collection.delete_one({"_id": user_id})
        except PyMongoError as exc:
            logger.warning("Delete of user %s failed: %s", user_id, exc)
            raise StoreError(f"Failed to delete user: {exc}") from exc

        removed = result.deleted_count > 0
        logger.info("Delete of user %s removed %d document(s)", user_id, result.deleted_count)
        return removed

    def list_all(self) -> List[User]:
        # pymongo cursors are lazy, so the first batch is fetched inside the loop.
        users: List[User] = []
        try:
            for document in self._collection.find({}):
                try:
                    users.append(document_to_user(document))
                except ValueError as exc:
                    logger.debug("Skipping undecodable document %s: %s", document.get("_id"), exc)
        except PyMongoError as exc:
            logger.warning("Listing users failed: %s", exc)
            raise StoreError(f"Failed to list users: {exc}") from exc
        return users


__all__ = [
    "CURRENT_VERSION",
    "UserRepository",
    "current_timestamp",
    "document_to_user",
    "new_user_document",
]
