"""Convert WienMobil line responses into source records."""

from __future__ import annotations

from datetime import datetime, timezone
import math
from typing import Any

from transit_card.data.models import Departure, SourceState

UNKNOWN_STATION = "Unknown Station"
UNKNOWN_DIRECTION = "Unknown"


def _parse_time(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def minutes_until(now: datetime, when: datetime) -> int:
    """Whole minutes until ``when``, rounded up."""
    return math.ceil((when - now).total_seconds() / 60.0)


def parse_line_response(data: Any, line_id: str, now: datetime | None = None) -> SourceState:
    """Flatten every direction of the first line into one time-ordered list.

    Inactive lines produce a record flagged inactive. Responses without line
    data, or with trips and departures that are not lists, produce no
    departures.
    """
    now = now or datetime.now(timezone.utc)
    station = data.get("station") if isinstance(data, dict) else None
    station = station if isinstance(station, dict) else {}
    station_name = str(station.get("name") or UNKNOWN_STATION)

    lines = station.get("lines") or []
    if not isinstance(lines, list) or not lines or not isinstance(lines[0], dict):
        return SourceState(stop_id=station_name)

    line = lines[0]
    status = str(line.get("status") or "").casefold()
    if "active" not in status or "inactive" in status:
        return SourceState(stop_id=station_name, active=False)

    label = str(line.get("name") or line_id)
    timed: list[tuple[datetime, Departure]] = []
    trips = line.get("trips")
    for trip in trips if isinstance(trips, list) else []:
        if not isinstance(trip, dict):
            continue
        direction = str(trip.get("tripHeadsign") or UNKNOWN_DIRECTION)
        departures = trip.get("departures")
        for departure in departures if isinstance(departures, list) else []:
            if not isinstance(departure, dict):
                continue
            planned = _parse_time(departure.get("plannedAt"))
            estimated = _parse_time(departure.get("estimatedAt"))
            when = estimated or planned
            if when is None:
                continue
            timed.append(
                (
                    when,
                    Departure(
                        line=label,
                        direction=direction,
                        countdown=minutes_until(now, when),
                        realtime=departure["estimatedAt"] if estimated else "",
                        planned=departure["plannedAt"] if planned else "",
                    ),
                )
            )

    timed.sort(key=lambda item: item[0])
    return SourceState(stop_id=station_name, departures=tuple(dep for _, dep in timed))


__all__ = ["minutes_until", "parse_line_response"]
