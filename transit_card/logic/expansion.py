"""Per-source expand/collapse flags owned by one card instance."""

from __future__ import annotations

from collections.abc import Iterable


class ExpansionState:
    """Tracks which sources show their full disturbance list."""

    def __init__(self) -> None:
        self._expanded: set[str] = set()

    def is_expanded(self, source_id: str) -> bool:
        return source_id in self._expanded

    def toggle(self, source_id: str) -> bool:
        """Flip a source and return its new state."""
        if source_id in self._expanded:
            self._expanded.discard(source_id)
            return False
        self._expanded.add(source_id)
        return True

    def prune(self, source_ids: Iterable[str]) -> None:
        """Drop flags for sources no longer configured."""
        self._expanded &= set(source_ids)

    def clear(self) -> None:
        self._expanded.clear()

    def as_dict(self) -> dict[str, bool]:
        return {source_id: True for source_id in self._expanded}


__all__ = ["ExpansionState"]
