"""Configuration loader for the transit departure card."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import os
from typing import Any

from dotenv import load_dotenv
import yaml

DEFAULT_TITLE = "Vienna Transport"
DEFAULT_UPDATE_INTERVAL = 60
DEFAULT_MAX_DEPARTURES = 3
DEFAULT_STATION_ID = "vao:490108800"
DEFAULT_API_BASE = "https://www.wienmobil.at"
SOURCE_TYPES = ("bim", "bus")


@dataclass(frozen=True)
class SourceConfig:
    """One configured stop/line and its render-time filters."""

    id: str
    name: str
    type: str = "bim"
    station_id: str = DEFAULT_STATION_ID
    direction: str | None = None
    lines: tuple[str, ...] | None = None


@dataclass(frozen=True)
class CardConfig:
    """Card-level settings pushed by the host or read from YAML."""

    title: str
    update_interval: int
    max_departures: int
    sources: tuple[SourceConfig, ...]

    @property
    def source_ids(self) -> list[str]:
        return [source.id for source in self.sources]


@dataclass(frozen=True)
class ApiConfig:
    """WienMobil API configuration."""

    base_url: str
    timeout_seconds: int


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str
    log_dir: str


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    card: CardConfig
    api: ApiConfig
    log: LoggingConfig


def _require_key(mapping: Mapping[str, Any], key: str, context: str) -> Any:
    if key not in mapping:
        raise ValueError(f"Missing required key '{key}' in {context} config")
    return mapping[key]


def _positive_int(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"'{key}' must be a positive integer, got {value!r}")
    return value


def _optional_text(value: Any, key: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, (str, int)):
        raise ValueError(f"'{key}' must be a string, got {value!r}")
    text = str(value).strip()
    return text or None


def parse_source_config(raw: Any, index: int) -> SourceConfig:
    """Validate a single source entry."""
    context = f"sources[{index}]"
    if not isinstance(raw, Mapping):
        raise ValueError(f"'{context}' config must be a mapping")

    source_id = _optional_text(_require_key(raw, "id", context), f"{context}.id")
    if source_id is None:
        raise ValueError(f"'{context}.id' must not be empty")

    source_type = raw.get("type") or "bim"
    if source_type not in SOURCE_TYPES:
        raise ValueError(f"'{context}.type' must be one of {', '.join(SOURCE_TYPES)}")

    lines = raw.get("lines")
    if lines is not None:
        if isinstance(lines, (str, int)):
            lines = [lines]
        if not isinstance(lines, (list, tuple)):
            raise ValueError(f"'{context}.lines' must be a list of line labels")
        lines = tuple(str(line).strip() for line in lines if str(line).strip()) or None

    return SourceConfig(
        id=source_id,
        name=_optional_text(raw.get("name"), f"{context}.name") or source_id,
        type=source_type,
        station_id=_optional_text(raw.get("station_id"), f"{context}.station_id") or DEFAULT_STATION_ID,
        direction=_optional_text(raw.get("direction"), f"{context}.direction"),
        lines=lines,
    )


def parse_card_config(raw: Any) -> CardConfig:
    """Validate a card configuration mapping, applying defaults."""
    if not isinstance(raw, Mapping):
        raise ValueError("'card' config must be a mapping")

    sources_raw = raw.get("sources", raw.get("lines"))
    if not isinstance(sources_raw, (list, tuple)) or not sources_raw:
        raise ValueError("You need to define at least one source")

    sources = tuple(parse_source_config(item, idx) for idx, item in enumerate(sources_raw))
    ids = [source.id for source in sources]
    if len(set(ids)) != len(ids):
        raise ValueError("Source ids must be unique")

    return CardConfig(
        title=_optional_text(raw.get("title"), "title") or DEFAULT_TITLE,
        update_interval=_positive_int(raw.get("update_interval", DEFAULT_UPDATE_INTERVAL), "update_interval"),
        max_departures=_positive_int(raw.get("max_departures", DEFAULT_MAX_DEPARTURES), "max_departures"),
        sources=sources,
    )


def stub_config() -> dict[str, Any]:
    """Example card configuration shown when the card is first added."""
    return {
        "title": DEFAULT_TITLE,
        "update_interval": DEFAULT_UPDATE_INTERVAL,
        "max_departures": DEFAULT_MAX_DEPARTURES,
        "sources": [
            {
                "id": "52",
                "station_id": DEFAULT_STATION_ID,
                "name": "Westbahnstraße/Neubaugasse",
                "type": "bim",
            },
            {
                "id": "13A",
                "station_id": DEFAULT_STATION_ID,
                "name": "Westbahnstraße/Neubaugasse",
                "type": "bus",
            },
        ],
    }


def load_config(path: str = "config/config.yaml") -> AppConfig:
    """Load application configuration from a YAML file."""
    load_dotenv()
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        raise ValueError(f"Config file not found: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping at the top level")

    card_section = _require_key(data, "card", "card")
    api_section = data.get("api") or {}
    logging_section = _require_key(data, "logging", "logging")

    if not isinstance(api_section, dict):
        raise ValueError("'api' config must be a mapping")
    if not isinstance(logging_section, dict):
        raise ValueError("'logging' config must be a mapping")

    card = parse_card_config(card_section)

    api = ApiConfig(
        base_url=os.environ.get("WIENMOBIL_API_BASE") or api_section.get("base_url", DEFAULT_API_BASE),
        timeout_seconds=_positive_int(api_section.get("timeout_seconds", 10), "timeout_seconds"),
    )

    logging = LoggingConfig(
        level=_require_key(logging_section, "level", "logging"),
        log_dir=_require_key(logging_section, "log_dir", "logging"),
    )

    return AppConfig(card=card, api=api, log=logging)
