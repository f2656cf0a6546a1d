"""Calendar event status notifications.

Status updates on the linked calendar activity are side effects of session
operations, not part of them. They are queued in an outbox once the session
write has committed and delivered best-effort: a failed delivery is logged
and dropped, never retried and never raised to the caller.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Literal, Protocol

from loguru import logger

EventStatus = Literal["scheduled", "in_progress", "completed"]


class EventStatusClient(Protocol):
    """Write side of the external calendar event service."""

    def set_status(self, event_id: str, status: EventStatus) -> None: ...


@dataclass(frozen=True)
class StatusNotification:
    """Pending status update for one calendar event."""

    event_id: str
    status: EventStatus
    session_id: str


class StatusOutbox:
    """Queue of status notifications awaiting delivery."""

    def __init__(self, client: EventStatusClient) -> None:
        self._client = client
        self._pending: deque[StatusNotification] = deque()

    def __len__(self) -> int:
        return len(self._pending)

    def enqueue(self, notification: StatusNotification) -> None:
        self._pending.append(notification)
        logger.debug(
            "Queued event status notification",
            event_id=notification.event_id,
            status=notification.status,
            session_id=notification.session_id,
        )

    def drain(self) -> int:
        """Deliver every pending notification.

        Returns:
            Number of notifications delivered successfully
        """
        delivered = 0
        while self._pending:
            notification = self._pending.popleft()
            if self._deliver(notification):
                delivered += 1
        return delivered

    def _deliver(self, notification: StatusNotification) -> bool:
        try:
            self._client.set_status(notification.event_id, notification.status)
        except Exception as e:
            logger.warning(
                f"Failed to update event {notification.event_id} status to '{notification.status}' "
                f"for bullpen session {notification.session_id}: {e}"
            )
            return False
        logger.info(
            "Event status updated",
            event_id=notification.event_id,
            status=notification.status,
            session_id=notification.session_id,
        )
        return True
