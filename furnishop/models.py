"""Domain models for the furniture shop service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from bson import ObjectId


@dataclass(frozen=True)
class User:
    """Represents a user document stored in the ``users`` collection."""

    id: ObjectId
    name: str
    email: str
    age: int
    created_at: datetime
    updated_at: datetime
    version: int


@dataclass(frozen=True)
class Furniture:
    """A catalog entry served by ``/getFurniture``."""

    id: int
    name: str
    description: str
    price: float


__all__ = ["Furniture", "User"]
