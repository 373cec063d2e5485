"""Transit departure card: configuration, gated updates and rendering."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import Enum
import logging
from typing import Any

from transit_card.config import CardConfig, parse_card_config
from transit_card.data.entities import snapshot_from_states
from transit_card.logic.expansion import ExpansionState
from transit_card.logic.render_gate import RenderGate
from transit_card.rendering.view_model import CardView, build_card_view

logger = logging.getLogger(__name__)


class CardPhase(Enum):
    IDLE = "idle"
    RENDERING = "rendering"


class TransportCard:
    """Departure card that rebuilds its view only when displayed data changes.

    Snapshots go through the RenderGate; the renderer is called only when the
    gate reports a change or the set of failed sources changes. Configuration
    changes and expand/collapse toggles always render, since they alter the
    view without touching the data. If the renderer raises, the gate is reset
    so the next snapshot renders again.

    Direction and line filters apply to the leading ``max_departures``
    departures only, so a filtered source may show fewer rows than
    ``max_departures`` even when later departures would match.
    """

    def __init__(self, renderer: Callable[[CardView], None]) -> None:
        self._renderer = renderer
        self._gate = RenderGate()
        self._expansion = ExpansionState()
        self._config: CardConfig | None = None
        self._snapshot: Mapping[str, Any] | None = None
        self._host_states: Mapping[str, Any] | None = None
        self._errors: dict[str, str] = {}
        self._phase = CardPhase.IDLE
        self._render_count = 0

    @property
    def config(self) -> CardConfig | None:
        return self._config

    @property
    def phase(self) -> CardPhase:
        return self._phase

    @property
    def render_count(self) -> int:
        return self._render_count

    @property
    def gate(self) -> RenderGate:
        return self._gate

    def set_config(self, config: CardConfig | Mapping[str, Any]) -> None:
        """Apply a new configuration; invalid input raises ValueError untouched."""
        if not isinstance(config, CardConfig):
            config = parse_card_config(config)

        self._config = config
        self._gate.reset()
        self._expansion.prune(config.source_ids)
        if self._host_states is not None:
            self._snapshot = snapshot_from_states(self._host_states, config.source_ids)
        logger.info("Configured %d source(s): %s", len(config.sources), ", ".join(config.source_ids))

        if self._snapshot is not None:
            self._render()

    def update(self, snapshot: Mapping[str, Any], errors: Mapping[str, str] | None = None) -> bool:
        """Offer a new snapshot; returns True if the view was rebuilt.

        ``errors`` maps source ids to the text of their last failed fetch.
        Only which sources failed affects rendering, not the error text.
        """
        if self._config is None:
            logger.debug("Snapshot ignored, card is not configured")
            return False

        self._snapshot = snapshot
        fresh_errors = {
            source_id: str(text)
            for source_id, text in (errors or {}).items()
            if source_id in self._config.source_ids
        }
        errors_changed = set(fresh_errors) != set(self._errors)
        self._errors = fresh_errors

        changed = self._gate.should_rerender(snapshot, self._config.sources, self._config.max_departures)
        if not changed and not errors_changed:
            logger.debug("Snapshot unchanged, render skipped")
            return False
        try:
            self._render()
        except Exception:
            self._gate.reset()
            raise
        return True

    def update_from_states(self, states: Mapping[str, Any]) -> bool:
        """Offer the host's entity states; unconfigured entities are ignored."""
        self._host_states = states
        if self._config is None:
            logger.debug("States ignored, card is not configured")
            return False
        return self.update(snapshot_from_states(states, self._config.source_ids))

    def is_expanded(self, source_id: str) -> bool:
        return self._expansion.is_expanded(source_id)

    def toggle_expanded(self, source_id: str) -> bool:
        """Expand or collapse a source's disturbance list; returns the new state."""
        if self._config is None or source_id not in self._config.source_ids:
            raise KeyError(f"Unknown source: {source_id}")
        expanded = self._expansion.toggle(source_id)
        if self._snapshot is not None:
            self._render()
        return expanded

    def get_card_size(self) -> float:
        if self._config is None:
            return 1.0
        return 1 + len(self._config.sources) * 0.5

    def teardown(self) -> None:
        """Drop all per-instance state."""
        self._gate.reset()
        self._expansion.clear()
        self._snapshot = None
        self._host_states = None
        self._errors = {}

    def current_view(self) -> CardView | None:
        if self._config is None or self._snapshot is None:
            return None
        return build_card_view(self._config, self._snapshot, self._expansion.as_dict(), self._errors)

    def _render(self) -> None:
        if self._phase is CardPhase.RENDERING:
            raise RuntimeError("Render requested while a render is in progress")
        view = self.current_view()
        if view is None:
            return
        self._phase = CardPhase.RENDERING
        try:
            self._renderer(view)
            self._render_count += 1
        finally:
            self._phase = CardPhase.IDLE
        logger.debug("Rendered card (%d total)", self._render_count)


__all__ = ["CardPhase", "TransportCard"]
