"""Core utilities for the furniture shop service."""

from __future__ import annotations

from typing import Any

from .config import ServiceConfig, load_config
from .database import Database, parse_object_id


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the HTTP application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "Database",
    "ServiceConfig",
    "create_app",
    "load_config",
    "parse_object_id",
]
