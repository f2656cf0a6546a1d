"""HTTP clients for the external directory and calendar services.

The engine does not own events, workout assignments or workouts. It reads
them from the directory service when starting a bullpen from a calendar
event, and writes back calendar event status as a best-effort side effect.
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from bullpen.config.settings import settings
from bullpen.sessions.errors import NonFatalSideEffectError, UpstreamServiceError
from bullpen.sessions.notifications import EventStatus


def _auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"} if token else {}


class DirectoryClient:
    """Read-only client for events, workout assignments and workouts."""

    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._client = client or httpx.Client(
            base_url=base_url or settings.directory_service_url,
            headers=_auth_headers(api_token if api_token is not None else settings.service_api_token),
            timeout=timeout or settings.service_timeout_seconds,
        )

    def _get(self, path: str, params: dict[str, str] | None = None) -> dict[str, Any] | None:
        try:
            response = self._client.get(path, params=params)
            if response.status_code == httpx.codes.NOT_FOUND:
                return None
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPStatusError, httpx.RequestError, ValueError) as e:
            logger.error(f"Directory service request failed for {path}: {e}")
            raise UpstreamServiceError("directory", f"GET {path} failed: {e}") from e

        if not isinstance(data, dict):
            raise UpstreamServiceError("directory", f"GET {path} returned {type(data).__name__}, expected object")
        return data

    def get_event(self, event_id: str) -> dict[str, Any] | None:
        return self._get(f"/events/{event_id}")

    def get_assignment(self, assignment_id: str) -> dict[str, Any] | None:
        return self._get(f"/workout-assignments/{assignment_id}")

    def get_workout(self, workout_id: str, organization_id: str | None = None) -> dict[str, Any] | None:
        params = {"organizationId": organization_id} if organization_id else None
        return self._get(f"/workouts/{workout_id}", params=params)


class CalendarEventClient:
    """Write client for calendar event status."""

    def __init__(
        self,
        base_url: str | None = None,
        api_token: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._client = client or httpx.Client(
            base_url=base_url or settings.calendar_service_url,
            headers=_auth_headers(api_token if api_token is not None else settings.service_api_token),
            timeout=timeout or settings.service_timeout_seconds,
        )

    def set_status(self, event_id: str, status: EventStatus) -> None:
        """Set the status of a calendar event.

        Raises:
            NonFatalSideEffectError: If the update is rejected or the service is unreachable
        """
        try:
            response = self._client.patch(f"/events/{event_id}", json={"status": status})
            response.raise_for_status()
        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            raise NonFatalSideEffectError(event_id, status, f"Event status update failed: {e}") from e
