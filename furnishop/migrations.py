"""One-shot schema migrations applied to the users collection at startup."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Sequence

from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from .errors import MigrationError
from .users import new_user_document

logger = logging.getLogger("furnishop.migrations")

SAMPLE_USER_NAME = "John Doe"
SAMPLE_USER_EMAIL = "john.doe@example.com"


@dataclass(frozen=True)
class Migration:
    """A named step; ``apply`` returns a short human readable summary."""

    name: str
    apply: Callable[[Collection], str]


@dataclass(frozen=True)
class MigrationResult:
    name: str
    detail: str


def seed_sample_user(collection: Collection) -> str:
    """Insert the sample user, but only into an empty collection."""

    if collection.find_one({}, {"_id": 1}) is not None:
        return "collection already populated; sample user not inserted"

    result = collection.insert_one(new_user_document(SAMPLE_USER_NAME, SAMPLE_USER_EMAIL))
    return f"inserted sample user {result.inserted_id}"


def backfill_age(collection: Collection) -> str:
    """Set ``age`` to 0 on every document, overwriting existing values."""

    result = collection.update_many({}, {"$set": {"age": 0}})
    return f"set age=0 on {result.modified_count} of {result.matched_count} document(s)"


MIGRATIONS: Sequence[Migration] = (
    Migration("seed_sample_user", seed_sample_user),
    Migration("backfill_age", backfill_age),
)


def run_migrations(
    collection: Collection,
    migrations: Sequence[Migration] = MIGRATIONS,
) -> List[MigrationResult]:
    """Apply ``migrations`` in order, stopping at the first failure."""

    results: List[MigrationResult] = []
    for migration in migrations:
        try:
            detail = migration.apply(collection)
        except PyMongoError as exc:
            logger.error("Migration %s failed: %s", migration.name, exc)
            raise MigrationError(migration.name, str(exc)) from exc
        logger.info("Migration %s: %s", migration.name, detail)
        results.append(MigrationResult(name=migration.name, detail=detail))
    return results


__all__ = [
    "MIGRATIONS",
    "Migration",
    "MigrationResult",
    "SAMPLE_USER_EMAIL",
    "SAMPLE_USER_NAME",
    "backfill_age",
    "run_migrations",
    "seed_sample_user",
]
