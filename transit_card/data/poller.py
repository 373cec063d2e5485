"""Threaded poller that periodically refreshes WienMobil departures."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import threading
import time

from transit_card.config import CardConfig
from transit_card.data.departures_parser import parse_line_response
from transit_card.data.models import SourceState
from transit_card.data.wienmobil_client import WienMobilClient, WienMobilClientError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollResult:
    """Snapshot of the latest poll across every configured source."""

    states: dict[str, SourceState]
    errors: dict[str, str]
    fetched_at: float


class WienMobilPoller:
    """Background poller that refreshes every configured line on a schedule.

    Sources whose request failed, or whose response could not be parsed, are
    left out of ``states``; the failure text is kept in ``errors`` so the card
    can show them as failed rather than still loading.
    """

    def __init__(self, client: WienMobilClient, config: CardConfig) -> None:
        self._client = client
        self._config = config
        self._latest: PollResult | None = None
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def get_latest(self) -> PollResult | None:
        """Return the most recent poll result, if any."""
        with self._lock:
            return self._latest

    def start(self) -> None:
        """Start the background polling thread."""
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Signal the polling thread to stop."""
        self._stop_event.set()

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            result = self._fetch_once()
            with self._lock:
                self._latest = result
            self._stop_event.wait(timeout=self._config.update_interval)

    def _fetch_once(self) -> PollResult:
        now = datetime.now(timezone.utc)
        states: dict[str, SourceState] = {}
        errors: dict[str, str] = {}
        for source in self._config.sources:
            try:
                data = self._client.get_line_departures(
                    source.station_id,
                    source.id,
                    self._config.max_departures,
                    departures_at=now,
                )
            except WienMobilClientError as exc:
                logger.warning("Fetching line %s failed: %s", source.id, exc)
                errors[source.id] = str(exc)
                continue
            try:
                states[source.id] = parse_line_response(data, source.id, now=now)
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                logger.warning("Parsing line %s failed: %s", source.id, exc)
                errors[source.id] = f"Invalid response: {exc}"
        return PollResult(states=states, errors=errors, fetched_at=time.time())


__all__ = ["PollResult", "WienMobilPoller"]
