"""Adapter from host entity states to a card snapshot."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from transit_card.data.models import SourceState

UNAVAILABLE_STATES = ("unavailable", "unknown")


def source_state_from_entity(entity: Any) -> SourceState | None:
    """Convert one entity state into a source record.

    Returns None when the host reports the entity as unavailable; a record
    with malformed attributes still converts, using default values.
    """
    if not isinstance(entity, Mapping):
        return None
    if entity.get("state") in UNAVAILABLE_STATES:
        return None
    return SourceState.from_mapping(entity.get("attributes"))


def snapshot_from_states(
    states: Mapping[str, Any],
    source_ids: Iterable[str],
) -> dict[str, SourceState]:
    """Build a snapshot for the configured ids; other entities are ignored."""
    snapshot: dict[str, SourceState] = {}
    for source_id in source_ids:
        state = source_state_from_entity(states.get(source_id))
        if state is not None:
            snapshot[source_id] = state
    return snapshot


__all__ = ["UNAVAILABLE_STATES", "snapshot_from_states", "source_state_from_entity"]
