"""Routing configuration from YAML files and the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml

from tdlr.routing import ErrorPolicy, TimestampSource

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TDLR_CONFIG"
DEFAULT_CONFIG_NAME = "tdlr.yaml"


class ConfigError(Exception):
    """Invalid or unreadable configuration file."""
    pass


@dataclass(frozen=True)
class RoutingConfig:
    """Settings for a routing run.

    Attributes:
        to: Routing expression (mutually exclusive with chat)
        chat: Fixed destination used when no expression is given
        include: Extensions to include (empty means all)
        exclude: Extensions to exclude
        timestamp_source: Which file timestamp feeds date/time variables
        on_error: What a per-file evaluation failure does to the run
    """

    to: str | None = None
    chat: str | None = None
    include: tuple[str, ...] = field(default_factory=tuple)
    exclude: tuple[str, ...] = field(default_factory=tuple)
    timestamp_source: TimestampSource = TimestampSource.MODIFIED
    on_error: ErrorPolicy = ErrorPolicy.ABORT

    @classmethod
    def load(cls, path: Path | None = None, cwd: Path | None = None) -> RoutingConfig:
        """Load config, looking in order at:

        1. The explicit path argument
        2. TDLR_CONFIG env var
        3. tdlr.yaml in the current directory
        4. Built-in defaults
        """
        if path is not None:
            return cls.from_file(path)

        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return cls.from_file(Path(env_path))

        local = (cwd or Path.cwd()) / DEFAULT_CONFIG_NAME
        if local.is_file():
            return cls.from_file(local)

        return cls()

    @classmethod
    def from_file(cls, path: Path) -> RoutingConfig:
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        config = cls.from_dict(data or {}, source=str(path))
        logger.info("Loaded config from %s", path)
        return config

    @classmethod
    def from_dict(cls, data: Any, source: str = "<config>") -> RoutingConfig:
        """Build a config from a parsed YAML mapping.

        The settings may sit at the top level or under a `routing:` key.
        """
        if not isinstance(data, dict):
            raise ConfigError(f"{source}: expected a mapping at the top level")
        if "routing" in data:
            data = data["routing"] or {}
            if not isinstance(data, dict):
                raise ConfigError(f"{source}: 'routing' must be a mapping")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"{source}: unknown key(s): {', '.join(unknown)}")

        kwargs: dict[str, Any] = {}
        for key in ("to", "chat"):
            if data.get(key) is not None:
                kwargs[key] = str(data[key])
        for key in ("include", "exclude"):
            if data.get(key) is not None:
                kwargs[key] = _as_extensions(data[key], key, source)
        if data.get("timestamp_source") is not None:
            kwargs["timestamp_source"] = _as_enum(
                TimestampSource, data["timestamp_source"], "timestamp_source", source
            )
        if data.get("on_error") is not None:
            kwargs["on_error"] = _as_enum(ErrorPolicy, data["on_error"], "on_error", source)

        config = cls(**kwargs)
        if config.to is not None and config.chat is not None:
            raise ConfigError(f"{source}: 'to' and 'chat' are mutually exclusive")
        return config

    def merge(self, **overrides: Any) -> RoutingConfig:
        """Return a copy with every non-None override applied.

        Setting `to` clears a configured `chat` and vice versa, so a command
        line choice always wins over the file.
        """
        changes = {k: v for k, v in overrides.items() if v is not None}
        if changes.get("to") is not None:
            changes.setdefault("chat", None)
        if changes.get("chat") is not None:
            changes.setdefault("to", None)
        return replace(self, **changes)


def _as_extensions(value: Any, key: str, source: str) -> tuple[str, ...]:
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, list):
        items = [str(v) for v in value]
    else:
        raise ConfigError(f"{source}: '{key}' must be a list or comma-separated string")
    return tuple(item.strip() for item in items if item.strip())


def _as_enum(enum_cls, value: Any, key: str, source: str):
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ConfigError(
            f"{source}: '{key}' must be one of {choices}, got {value!r}"
        ) from None
