"""WienMobil public transport API client."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import requests

from transit_card.config import DEFAULT_API_BASE

REQUEST_HEADERS = {
    "Accept": "application/json,text/html;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "User-Agent": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/133.0.0.0 Safari/537.36"
    ),
}


class WienMobilClientError(Exception):
    """Raised when a WienMobil request fails or returns a non-200 response."""


class WienMobilClient:
    """Thin wrapper around the WienMobil station/line endpoint using requests."""

    def __init__(self, base_url: str = DEFAULT_API_BASE, timeout_seconds: int = 10) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds

    def get_line_departures(
        self,
        station_id: str,
        line_id: str,
        limit: int,
        departures_at: datetime | None = None,
    ) -> dict[str, Any]:
        """Fetch upcoming departures of one line at one station; returns raw JSON."""
        at = departures_at or datetime.now(timezone.utc)
        path = (
            f"/api/public-transport-stations/{quote(station_id, safe='')}"
            f"/lines/{quote(line_id, safe='')}"
        )
        params = {
            "departuresLimit": limit,
            "departuresAt": at.isoformat(),
        }
        return self._get(path, params=params)

    def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            response = requests.get(
                url, headers=REQUEST_HEADERS, params=params, timeout=self._timeout_seconds
            )
        except requests.RequestException as exc:
            raise WienMobilClientError(f"WienMobil API request failed: {exc}") from exc

        if response.status_code != 200:
            body_text = response.text.strip()
            detail = f"Status {response.status_code}"
            if body_text:
                detail = f"{detail}, Body: {body_text}"
            raise WienMobilClientError(f"WienMobil API request failed: {detail}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise WienMobilClientError("WienMobil API response was not valid JSON") from exc
        if not isinstance(payload, dict):
            raise WienMobilClientError("WienMobil API response was not a JSON object")
        return payload


__all__ = ["WienMobilClient", "WienMobilClientError"]
