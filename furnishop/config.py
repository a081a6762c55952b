"""Configuration management for the furniture shop service."""
from __future__ import annotations

import math
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

_ENV_OVERRIDES = {
    "FURNISHOP_MONGO_URI": "mongo_uri",
    "FURNISHOP_DATABASE": "database_name",
    "FURNISHOP_COLLECTION": "collection_name",
    "FURNISHOP_HOST": "host",
    "FURNISHOP_PORT": "port",
    "FURNISHOP_CONNECT_TIMEOUT": "connect_timeout",
    "FURNISHOP_STATIC_DIR": "static_dir",
}


@dataclass(frozen=True)
class ServiceConfig:
    """Connection and listener settings for the service."""

    mongo_uri: str = "mongodb://localhost:27017"
    database_name: str = "furnitureShopDB"
    collection_name: str = "users"
    host: str = "0.0.0.0"
    port: int = 8080
    connect_timeout: float = 10.0
    static_dir: Path = Path(".")

    @staticmethod
    def from_dict(data: Mapping[str, object], base_path: Path | None = None) -> "ServiceConfig":
        """Create a :class:`ServiceConfig` from raw dictionary data."""
        known = {field.name for field in fields(ServiceConfig)}
        unknown = set(data.keys()) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        values: Dict[str, object] = {}
        for key, raw in data.items():
            values[key] = _coerce(key, raw)

        static_dir = values.get("static_dir")
        if isinstance(static_dir, Path) and not static_dir.is_absolute() and base_path is not None:
            values["static_dir"] = (base_path / static_dir).resolve(strict=False)

        return ServiceConfig(**values)  # type: ignore[arg-type]


def _coerce(key: str, raw: object) -> object:
    if raw is None:
        raise ValueError(f"Configuration value for '{key}' must not be empty")
    try:
        if key == "port":
            port = int(str(raw))
            if not 1 <= port <= 65535:
                raise ValueError
            return port
        if key == "connect_timeout":
            timeout = float(str(raw))
            if not math.isfinite(timeout) or timeout <= 0:
                raise ValueError
            return timeout
    except ValueError as exc:
        raise ValueError(f"Invalid value for '{key}': {raw!r}") from exc
    if key == "static_dir":
        return Path(str(raw)).expanduser()
    value = str(raw).strip()
    if not value:
        raise ValueError(f"Configuration value for '{key}' must not be empty")
    return value


def load_service_config(config_path: Path) -> ServiceConfig:
    """Load settings from a YAML file, falling back to defaults when it is absent."""
    if not config_path.exists():
        return ServiceConfig()

    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ValueError("Configuration file must contain a mapping of settings")

    return ServiceConfig.from_dict(raw, base_path=config_path.parent)


def apply_env_overrides(
    config: ServiceConfig,
    environ: Optional[Mapping[str, str]] = None,
) -> ServiceConfig:
    env = os.environ if environ is None else environ
    overrides = {
        field_name: _coerce(field_name, env[variable])
        for variable, field_name in _ENV_OVERRIDES.items()
        if env.get(variable)
    }
    if not overrides:
        return config
    return replace(config, **overrides)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "furnishop.yaml").resolve(strict=False)
    return candidate


def load_config(config_path: Optional[str] = None) -> ServiceConfig:
    path = resolve_config_path(config_path or os.getenv("FURNISHOP_CONFIG"))
    return apply_env_overrides(load_service_config(path))


__all__ = [
    "ServiceConfig",
    "apply_env_overrides",
    "load_config",
    "load_service_config",
    "resolve_config_path",
]
