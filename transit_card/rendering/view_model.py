"""View model built from configuration, snapshot and expansion state."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from transit_card.config import CardConfig
from transit_card.data.models import Departure, as_source_state
from transit_card.logic.filters import visible_departures

STATUS_READY = "ready"
STATUS_MISSING = "missing"
STATUS_ERROR = "error"
STATUS_INACTIVE = "inactive"


@dataclass(frozen=True)
class DepartureRow:
    """Single departure line for display."""

    line: str
    direction: str
    countdown_text: str
    clock_time: str
    realtime: bool
    disturbances: int = 0


@dataclass(frozen=True)
class DisturbanceRow:
    """Single service alert for display."""

    title: str
    priority: str


@dataclass(frozen=True)
class SourceView:
    """Everything shown for one configured source.

    ``status`` is one of ``ready``, ``missing`` (no data yet), ``error`` (the
    last fetch failed, ``error`` holds its text) or ``inactive``.
    """

    source_id: str
    name: str
    type: str
    status: str
    stop: str = ""
    departures: tuple[DepartureRow, ...] = ()
    disturbances: tuple[DisturbanceRow, ...] = ()
    expanded: bool = False
    error: str = ""


@dataclass(frozen=True)
class CardView:
    """Whole card for the renderer."""

    title: str
    sources: tuple[SourceView, ...]


def _format_clock(timestamp: str) -> str:
    if not timestamp:
        return ""
    try:
        if timestamp.endswith("Z"):
            timestamp = timestamp[:-1] + "+00:00"
        return datetime.fromisoformat(timestamp).strftime("%H:%M")
    except ValueError:
        return ""


def countdown_text(minutes: int) -> str:
    return "now" if minutes <= 0 else f"{minutes} min"


def departure_row(departure: Departure) -> DepartureRow:
    return DepartureRow(
        line=departure.line,
        direction=departure.direction,
        countdown_text=countdown_text(departure.countdown),
        clock_time=_format_clock(departure.realtime or departure.planned),
        realtime=bool(departure.realtime),
        disturbances=departure.disturbances,
    )


def build_card_view(
    config: CardConfig,
    snapshot: Mapping[str, Any],
    expanded: Mapping[str, bool] | None = None,
    errors: Mapping[str, str] | None = None,
) -> CardView:
    """Assemble the card from the leading, filtered departures of each source.

    A source absent from the snapshot is shown as failed when ``errors`` has
    an entry for it, otherwise as still loading.
    """
    expanded = expanded or {}
    errors = errors or {}
    views: list[SourceView] = []
    for source in config.sources:
        record = snapshot.get(source.id)
        if record is None:
            if source.id in errors:
                views.append(
                    SourceView(source.id, source.name, source.type, STATUS_ERROR, error=str(errors[source.id]))
                )
            else:
                views.append(SourceView(source.id, source.name, source.type, STATUS_MISSING))
            continue
        state = as_source_state(record)
        shown = visible_departures(state.departures, source, config.max_departures) if state.active else []
        views.append(
            SourceView(
                source_id=source.id,
                name=source.name,
                type=source.type,
                status=STATUS_READY if state.active else STATUS_INACTIVE,
                stop=state.stop_id,
                departures=tuple(departure_row(dep) for dep in shown),
                disturbances=tuple(
                    DisturbanceRow(item.title or item.key, item.priority) for item in state.disturbances
                ),
                expanded=bool(expanded.get(source.id, False)),
            )
        )
    return CardView(title=config.title, sources=tuple(views))


__all__ = [
    "STATUS_ERROR",
    "STATUS_INACTIVE",
    "STATUS_MISSING",
    "STATUS_READY",
    "CardView",
    "DepartureRow",
    "DisturbanceRow",
    "SourceView",
    "build_card_view",
    "countdown_text",
]
