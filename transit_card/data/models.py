"""Source records carried by a snapshot."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


def coerce_text(value: Any) -> str:
    """Return a stable string for an optional field; unset values become ''."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, bool)):
        return str(value)
    return ""


def coerce_int(value: Any) -> int:
    """Return an integer for a numeric-ish field; anything unusable becomes 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value and abs(value) != float("inf") else 0
    if isinstance(value, str):
        try:
            return int(float(value.strip()))
        except (ValueError, OverflowError):
            return 0
    return 0


def coerce_flag(value: Any, default: bool = True) -> bool:
    """Return a boolean for a flag field; unset or unreadable values use the default."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        text = value.strip().casefold()
        if text in ("true", "yes", "on", "1", "active"):
            return True
        if text in ("false", "no", "off", "0", "inactive"):
            return False
    return default


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _sequence(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


@dataclass(frozen=True)
class Disturbance:
    """Service alert attached to a stop.

    ``key`` identifies the alert (its id, or its title when it has none);
    ``title`` is the text shown to the user.
    """

    key: str
    priority: str = ""
    title: str = ""

    @classmethod
    def from_mapping(cls, raw: Any) -> Disturbance:
        data = _mapping(raw)
        title = coerce_text(data.get("title"))
        key = coerce_text(data.get("id")) or title
        return cls(key=key, priority=coerce_text(data.get("priority")), title=title or key)


@dataclass(frozen=True)
class Departure:
    """Single upcoming departure."""

    line: str
    direction: str
    countdown: int
    realtime: str = ""
    planned: str = ""
    disturbances: int = 0

    @classmethod
    def from_mapping(cls, raw: Any) -> Departure:
        data = _mapping(raw)
        return cls(
            line=coerce_text(data.get("line")),
            direction=coerce_text(data.get("direction")),
            countdown=coerce_int(data.get("countdown")),
            realtime=coerce_text(data.get("realtime")),
            planned=coerce_text(data.get("planned")),
            disturbances=coerce_int(data.get("disturbances")),
        )


@dataclass(frozen=True)
class SourceState:
    """Everything a source currently reports.

    ``active`` is False when the line is out of service; such a source still
    carries its stop and disturbances.
    """

    stop_id: str
    departures: tuple[Departure, ...] = ()
    disturbances: tuple[Disturbance, ...] = ()
    active: bool = True

    @classmethod
    def from_mapping(cls, raw: Any) -> SourceState:
        """Build a record from loosely-typed attributes without ever raising."""
        data = _mapping(raw)
        return cls(
            stop_id=coerce_text(data.get("stop_id")),
            departures=tuple(Departure.from_mapping(item) for item in _sequence(data.get("departures"))),
            disturbances=tuple(
                Disturbance.from_mapping(item) for item in _sequence(data.get("traffic_info"))
            ),
            active=coerce_flag(data.get("active")),
        )


def as_source_state(record: Any) -> SourceState:
    """Accept either a SourceState or a raw attribute mapping."""
    if isinstance(record, SourceState):
        return record
    return SourceState.from_mapping(record)


__all__ = [
    "Departure",
    "Disturbance",
    "SourceState",
    "as_source_state",
    "coerce_flag",
    "coerce_int",
    "coerce_text",
]
