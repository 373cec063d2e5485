"""Render-time departure filters for a configured source."""

from __future__ import annotations

from collections.abc import Iterable

from transit_card.config import SourceConfig
from transit_card.data.models import Departure


def matches_direction(departure: Departure, direction: str | None) -> bool:
    """Case-insensitive substring match on the direction label."""
    if not direction:
        return True
    return direction.casefold() in departure.direction.casefold()


def matches_lines(departure: Departure, lines: Iterable[str] | None) -> bool:
    """Exact match of the line label against the configured set."""
    if not lines:
        return True
    return departure.line in set(lines)


def visible_departures(
    departures: Iterable[Departure],
    source: SourceConfig,
    display_limit: int,
) -> list[Departure]:
    """Departures shown for a source: the leading ones, then filtered."""
    leading = list(departures)[: max(display_limit, 1)]
    return [
        dep
        for dep in leading
        if matches_direction(dep, source.direction) and matches_lines(dep, source.lines)
    ]


__all__ = ["matches_direction", "matches_lines", "visible_departures"]
