"""Fingerprint-based change detection that gates full card rebuilds."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import json
import logging
from typing import Any

from transit_card.data.models import SourceState, as_source_state, coerce_int, coerce_text

logger = logging.getLogger(__name__)

# JSON encodings of a record always start with "[", so this can never collide.
MISSING = "<missing>"


def fingerprint(record: SourceState | Mapping[str, Any] | None, display_limit: int) -> str:
    """Project the displayed fields of a source record into a comparable string.

    Only the stop id, the first ``display_limit`` departures, the disturbance
    (key, priority) pairs and the active flag take part. The projection is
    encoded as nested JSON arrays: departures and disturbances are arrays of
    records, each record an array of fields, so field contents are escaped
    and can never be mistaken for structure.
    """
    if record is None:
        return MISSING
    state = as_source_state(record)
    limit = max(coerce_int(display_limit), 1)
    departures = [
        [dep.line, dep.direction, dep.countdown, dep.realtime, dep.planned, dep.disturbances]
        for dep in state.departures[:limit]
    ]
    disturbances = [[item.key, item.priority] for item in state.disturbances]
    payload = [state.stop_id, departures, disturbances, state.active]
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


class RenderGate:
    """Decides whether a new snapshot warrants rebuilding the view.

    Keeps the last fingerprint per configured source. Every comparison
    replaces the stored table with exactly the sources that were compared,
    so entries for removed sources never survive a call.
    """

    def __init__(self) -> None:
        # None until the first comparison after creation or reset.
        self._fingerprints: dict[str, str] | None = None

    @property
    def fingerprints(self) -> dict[str, str]:
        """Copy of the current fingerprint table."""
        return dict(self._fingerprints or {})

    def reset(self) -> None:
        """Forget every fingerprint; the next comparison reports a change."""
        self._fingerprints = None

    def should_rerender(
        self,
        snapshot: Mapping[str, Any],
        sources: Iterable[Any],
        display_limit: int,
    ) -> bool:
        """Return True if any configured source changed since the last call.

        ``sources`` may hold plain ids, mappings with an ``"id"`` key or
        configuration records exposing an ``id`` attribute. Snapshot entries for unconfigured ids are ignored.
        """
        if not isinstance(snapshot, Mapping):
            snapshot = {}
        fresh: dict[str, str] = {}
        for source in sources:
            source_id = _source_id(source)
            fresh[source_id] = fingerprint(snapshot.get(source_id), display_limit)

        previous = self._fingerprints
        self._fingerprints = fresh

        if previous is None:
            logger.debug("No baseline, rendering %d source(s)", len(fresh))
            return True

        changed_ids = [
            source_id for source_id, value in fresh.items() if previous.get(source_id) != value
        ]
        if changed_ids:
            logger.debug("Sources changed: %s", ", ".join(changed_ids))
        return bool(changed_ids)


def _source_id(source: Any) -> str:
    if isinstance(source, str):
        return source
    if isinstance(source, Mapping):
        return coerce_text(source.get("id"))
    return str(getattr(source, "id", source))


__all__ = ["MISSING", "RenderGate", "fingerprint"]
