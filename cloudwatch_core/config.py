"""
Sink configuration.

Settings come from a YAML file, from environment variables, or both (the
environment wins). Supported env vars:
- CLOUDWATCH_LOG_GROUP: Log group name
- CLOUDWATCH_LOG_STREAM: Log stream name
- CLOUDWATCH_ASYNC: Fire-and-forget dispatch ("1", "true", "yes", "on")
- CLOUDWATCH_MIN_LEVEL: Minimum level to ship (default: INFO)
- CLOUDWATCH_FLUSH_LEVEL: Records above this level force a flush (default: ERROR)
"""

import os
from dataclasses import dataclass
from typing import Any, Optional

import yaml

from .levels import Level

ENV_GROUP = "CLOUDWATCH_LOG_GROUP"
ENV_STREAM = "CLOUDWATCH_LOG_STREAM"
ENV_ASYNC = "CLOUDWATCH_ASYNC"
ENV_MIN_LEVEL = "CLOUDWATCH_MIN_LEVEL"
ENV_FLUSH_LEVEL = "CLOUDWATCH_FLUSH_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


@dataclass(frozen=True)
class CoreConfig:
    """Immutable settings for a CloudWatchCore."""

    group_name: str
    stream_name: str
    async_dispatch: bool = False
    min_level: Level = Level.INFO
    flush_level: Level = Level.ERROR

    def __post_init__(self):
        if not self.group_name:
            raise ValueError("group_name required")
        if not self.stream_name:
            raise ValueError("stream_name required")
        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "min_level", Level.parse(self.min_level))
        object.__setattr__(self, "flush_level", Level.parse(self.flush_level))
        object.__setattr__(self, "async_dispatch", _parse_bool(self.async_dispatch))


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    mapping = {
        ENV_GROUP: "group_name",
        ENV_STREAM: "stream_name",
        ENV_ASYNC: "async_dispatch",
        ENV_MIN_LEVEL: "min_level",
        ENV_FLUSH_LEVEL: "flush_level",
    }
    for env_key, attr in mapping.items():
        value = os.environ.get(env_key, "")
        if value:
            overrides[attr] = value
    return overrides


def config_from_env(group_name: Optional[str] = None, stream_name: Optional[str] = None) -> CoreConfig:
    """
    Create a CoreConfig from environment variables.

    Args:
        group_name: Override group name from env
        stream_name: Override stream name from env

    Returns:
        CoreConfig built from the environment
    """
    values = _env_overrides()
    if group_name:
        values["group_name"] = group_name
    if stream_name:
        values["stream_name"] = stream_name

    if not values.get("group_name"):
        raise ValueError(f"group_name required or set {ENV_GROUP}")
    if not values.get("stream_name"):
        raise ValueError(f"stream_name required or set {ENV_STREAM}")

    return CoreConfig(**values)


def load_config(path: str) -> CoreConfig:
    """Read a YAML config file and apply env var overrides.

    The settings may sit under a top-level ``cloudwatch`` key or at the top
    level of the document.
    """
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    section = data.get("cloudwatch", data)
    if not isinstance(section, dict):
        raise ValueError(f"'cloudwatch' section in {path} must be a mapping")

    known = {"group_name", "stream_name", "async_dispatch", "min_level", "flush_level"}
    unknown = set(section) - known
    if unknown:
        raise ValueError(f"Unknown config keys in {path}: {sorted(unknown)}")

    values = dict(section)
    values.update(_env_overrides())
    for required in ("group_name", "stream_name"):
        if not values.get(required):
            raise ValueError(f"{required} missing from {path}")
    return CoreConfig(**values)
