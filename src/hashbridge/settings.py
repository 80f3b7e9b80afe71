"""Static configuration for hashbridge.

All user-editable settings (polling, destinations, routes, logging) live in a
single JSON file for quick edits without touching Python. Secrets never go in
this file; they are read from the environment by ``hashbridge.client``.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

from hashbridge.core.config import DEFAULT_POLL_TIMEOUT, BackoffConfig, PollConfig, RouteConfig

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))

# config.json sits at the project root unless HASHBRIDGE_CONFIG points elsewhere.
DEFAULT_CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")
ENV_CONFIG_PATH = "HASHBRIDGE_CONFIG"

DEFAULT_DB_PATH = "hashbridge.db"

# Required options per destination type.
DESTINATION_TYPES = {
    "notion_page": ("page_id",),
    "telegram_chat": ("chat_id",),
    "log": (),
}


class ConfigError(RuntimeError):
    """Startup configuration is missing or invalid."""


@dataclass(frozen=True)
class DestinationConfig:
    """One named destination as declared in config.json."""

    name: str
    type: str
    options: dict = field(default_factory=dict)


@dataclass(frozen=True)
class StateConfig:
    """Optional cursor persistence."""

    enabled: bool = False
    db_path: str = DEFAULT_DB_PATH


@dataclass(frozen=True)
class Settings:
    poll: PollConfig
    state: StateConfig
    destinations: Tuple[DestinationConfig, ...]
    routes: Tuple[RouteConfig, ...]
    logging: dict
    # Relative paths (log file, database) resolve against the config file directory.
    base_dir: str = PROJECT_ROOT


def resolve_config_path(path: Optional[str] = None) -> str:
    """Pick the config path: explicit argument, then env, then the default."""

    return path or os.getenv(ENV_CONFIG_PATH) or DEFAULT_CONFIG_PATH


def _load_json_config(path: str) -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(path):
        raise ConfigError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as handle:
        try:
            data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Config file {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def _as_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from exc


def _as_float(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be a number, got {value!r}") from exc


def _section(config: dict, key: str) -> dict:
    value = config.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"{key} must be a JSON object, got {value!r}")
    return value


def _entries(config: dict, key: str) -> list:
    value = config.get(key, [])
    if not isinstance(value, list):
        raise ConfigError(f"{key} must be a JSON list, got {value!r}")
    for entry in value:
        if not isinstance(entry, dict):
            raise ConfigError(f"Every entry of {key} must be a JSON object, got {entry!r}")
    return value


def _optional_str(entry: dict, key: str, owner: str) -> Optional[str]:
    value = entry.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"{owner} {key!r} must be a string, got {value!r}")
    return value


def _parse_poll(raw: dict) -> PollConfig:
    raw_backoff = _section(raw, "backoff")
    defaults = BackoffConfig()
    backoff = BackoffConfig(
        initial_seconds=_as_float(raw_backoff.get("initial_seconds", defaults.initial_seconds), "poll.backoff.initial_seconds"),
        max_seconds=_as_float(raw_backoff.get("max_seconds", defaults.max_seconds), "poll.backoff.max_seconds"),
    )
    timeout = _as_int(raw.get("timeout_seconds", DEFAULT_POLL_TIMEOUT), "poll.timeout_seconds")
    if timeout < 0:
        raise ConfigError("poll.timeout_seconds must not be negative")
    return PollConfig(
        timeout_seconds=timeout,
        initial_offset=_as_int(raw.get("initial_offset", 0), "poll.initial_offset"),
        backoff=backoff,
    )


def _parse_destinations(raw_destinations: list) -> Tuple[DestinationConfig, ...]:
    destinations = []
    seen: set[str] = set()
    for entry in raw_destinations:
        name = _optional_str(entry, "name", "Destination")
        kind = _optional_str(entry, "type", "Destination")
        if not name:
            raise ConfigError(f"Destination without a name: {entry!r}")
        if name in seen:
            raise ConfigError(f"Duplicate destination name: {name}")
        if kind not in DESTINATION_TYPES:
            raise ConfigError(f"Destination {name} has unsupported type {kind!r}")
        for option in DESTINATION_TYPES[kind]:
            if not entry.get(option):
                raise ConfigError(f"Destination {name} ({kind}) requires {option!r}")
        seen.add(name)
        options = {key: value for key, value in entry.items() if key not in {"name", "type"}}
        destinations.append(DestinationConfig(name=name, type=kind, options=options))
    return tuple(destinations)


def _parse_routes(raw_routes: list) -> Tuple[RouteConfig, ...]:
    routes = []
    for index, entry in enumerate(raw_routes):
        if not entry.get("enabled", True):
            continue
        name = _optional_str(entry, "name", "Route") or f"route-{index + 1}"
        hashtag = _optional_str(entry, "hashtag", f"Route {name}")
        destination = _optional_str(entry, "destination", f"Route {name}")
        if not hashtag or not destination:
            raise ConfigError(f"Route {name} requires 'hashtag' and 'destination'")
        routes.append(RouteConfig(name=name, hashtag=hashtag, destination=destination))
    return tuple(routes)


def load_settings(path: Optional[str] = None) -> Settings:
    """Load and validate config.json into a Settings object."""

    config_path = resolve_config_path(path)
    config = _load_json_config(config_path)

    raw_state = _section(config, "state")
    state = StateConfig(
        enabled=bool(raw_state.get("enabled", False)),
        db_path=_optional_str(raw_state, "db_path", "state") or DEFAULT_DB_PATH,
    )

    destinations = _parse_destinations(_entries(config, "destinations"))
    routes = _parse_routes(_entries(config, "routes"))
    known = {destination.name for destination in destinations}
    for route in routes:
        if route.destination not in known:
            raise ConfigError(f"Route {route.name} refers to unknown destination {route.destination!r}")

    return Settings(
        poll=_parse_poll(_section(config, "poll")),
        state=state,
        destinations=destinations,
        routes=routes,
        logging=_section(config, "logging"),
        base_dir=os.path.dirname(os.path.abspath(config_path)),
    )
