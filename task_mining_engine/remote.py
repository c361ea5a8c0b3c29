"""Client for the remote statistics API.

Every endpoint answers with the envelope ``{"success": bool, "data": ...,
"error": str}``. The client unwraps it and raises :class:`RemoteStatsError`
for transport failures, non-2xx answers and ``success: false``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from task_mining_engine.adapters import json_adapter
from task_mining_engine.config import Settings
from task_mining_engine.schema import EventRecord

logger = logging.getLogger(__name__)


class RemoteStatsError(RuntimeError):
    """Raised when the statistics API cannot serve a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RemoteStatsClient:
    def __init__(self, base_url: str, timeout: float = 20.0, session: Optional[Any] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, path: str) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise RemoteStatsError(f"Request to {url} failed: {exc}") from exc

        try:
            envelope = response.json()
        except ValueError as exc:
            raise RemoteStatsError(f"Malformed response from {url}", response.status_code) from exc

        if not isinstance(envelope, dict):
            raise RemoteStatsError(f"Malformed response from {url}", response.status_code)

        if not response.ok or not envelope.get("success", False):
            message = envelope.get("error") or f"HTTP {response.status_code}"
            logger.warning("Statistics API error for %s: %s", url, message)
            raise RemoteStatsError(message, response.status_code)

        return envelope.get("data")

    def fetch(self, path: str) -> list[dict[str, Any]]:
        """Return the ``data`` rows of a list endpoint, ``[]`` when absent."""

        data = self._request(path)
        if data is None:
            return []
        if not isinstance(data, list):
            raise RemoteStatsError(f"Expected a list from {path}")
        return data

    def fetch_events(self, path: str, dataset: str) -> list[EventRecord]:
        """Fetch raw event rows and normalize them like a JSON file."""

        return json_adapter.parse_items(self.fetch(path), dataset)

    def health(self) -> dict[str, Any]:
        url = f"{self.base_url}/health"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as exc:
            raise RemoteStatsError(f"Health check failed: {exc}") from exc

    def dashboard_metrics(self) -> dict[str, Any]:
        return self._request("/api/dashboard/metrics") or {}

    def teams(self) -> list[str]:
        return self.fetch("/api/salesforce/teams")

    def resources(self) -> list[str]:
        return self.fetch("/api/salesforce/resources")

    def team_stats(self) -> list[dict[str, Any]]:
        return self.fetch("/api/salesforce/team-stats")

    def resource_stats(self) -> list[dict[str, Any]]:
        return self.fetch("/api/salesforce/resource-stats")

    def window_stats(self) -> list[dict[str, Any]]:
        return self.fetch("/api/salesforce/window-stats")

    def amadeus_case_stats(self) -> list[dict[str, Any]]:
        return self.fetch("/api/amadeus/case-stats")

    def amadeus_agent_stats(self) -> list[dict[str, Any]]:
        return self.fetch("/api/amadeus/agent-stats")

    def amadeus_window_stats(self) -> list[dict[str, Any]]:
        return self.fetch("/api/amadeus/window-stats")

    def amadeus_activity_stats(self) -> list[dict[str, Any]]:
        return self.fetch("/api/amadeus/activity-stats")


def client_from_settings(settings: Settings) -> RemoteStatsClient:
    return RemoteStatsClient(settings.api.base_url, timeout=settings.api.timeout)
