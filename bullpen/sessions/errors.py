"""Error types for bullpen sessions.

Distinct error types so callers can tell a rejected capture apart from a
missing session or a storage failure.
"""


class BullpenError(Exception):
    """Base exception for all bullpen session errors."""

    pass


class ValidationError(BullpenError):
    """Raised when a pitch capture or session draft is incomplete.

    Rejected before anything reaches persistence.
    """

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        self.message = message or f"Missing required field: {field}"
        super().__init__(self.message)


class NotFoundError(BullpenError):
    """Raised when an id does not resolve to a stored session (or a looked-up event)."""

    def __init__(self, resource_id: str, resource: str = "Bullpen session"):
        self.resource_id = resource_id
        self.resource = resource
        super().__init__(f"{resource} {resource_id} not found")


class PersistenceError(BullpenError):
    """Raised when a storage read or write fails. Never retried by the engine."""

    pass


class ConcurrentUpdateError(PersistenceError):
    """Raised when a write was based on a revision that is no longer current."""

    def __init__(self, session_id: str, expected_revision: int):
        self.session_id = session_id
        self.expected_revision = expected_revision
        super().__init__(f"Bullpen session {session_id} changed since revision {expected_revision}")


class SessionStateError(BullpenError):
    """Raised when an operation does not fit the session's lifecycle state."""

    pass


class NonFatalSideEffectError(BullpenError):
    """Raised by side-effect adapters (event status updates).

    Always caught and logged by the notification outbox; it never reaches
    the caller of a session operation.
    """

    def __init__(self, event_id: str, status: str, message: str | None = None):
        self.event_id = event_id
        self.status = status
        self.message = message or f"Failed to set status '{status}' on event {event_id}"
        super().__init__(self.message)


class UpstreamServiceError(BullpenError):
    """Raised when a read from an external collaborator (events, assignments, workouts) fails."""

    def __init__(self, service: str, message: str):
        self.service = service
        super().__init__(f"{service}: {message}")
