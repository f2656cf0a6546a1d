"""Bullpen session engine.

Caller-facing facade over the repository, pitch logger and lifecycle
manager. Every operation re-reads the stored session; callers should treat
returned sessions as disposable snapshots.
"""

from __future__ import annotations

from bullpen.config.settings import settings
from bullpen.sessions.errors import NotFoundError
from bullpen.sessions.lifecycle import AssignmentLookup, PriorSessionResolution, SessionLifecycleManager
from bullpen.sessions.notifications import EventStatusClient, StatusOutbox
from bullpen.sessions.pitch_logger import PitchLogger
from bullpen.sessions.repository import SessionRepository
from bullpen.sessions.schemas import (
    BullpenSession,
    PitchCapture,
    SessionDraft,
    SessionSummaryView,
    SessionViewState,
    StartSessionRequest,
    StartSessionResponse,
)
from bullpen.sessions.view_state import build_summary_view, build_view_state


class BullpenSessionEngine:
    """Service for bullpen session creation, pitch logging and completion."""

    def __init__(
        self,
        repository: SessionRepository,
        event_client: EventStatusClient,
        lookup: AssignmentLookup | None = None,
        *,
        auto_dispatch: bool = True,
    ) -> None:
        self._repository = repository
        self._lookup = lookup
        self.outbox = StatusOutbox(event_client)
        self.lifecycle = SessionLifecycleManager(repository, self.outbox, auto_dispatch=auto_dispatch)
        self.pitch_logger = PitchLogger(repository)

    def create_session(self, draft: SessionDraft) -> BullpenSession:
        return self.lifecycle.create(draft)

    def get_session(self, session_id: str) -> BullpenSession | None:
        return self._repository.get_by_id(session_id)

    def require_session(self, session_id: str) -> BullpenSession:
        session = self._repository.get_by_id(session_id)
        if session is None:
            raise NotFoundError(session_id)
        return session

    def log_pitch(self, session_id: str, capture: PitchCapture) -> BullpenSession:
        return self.pitch_logger.log_pitch(session_id, capture)

    def complete_session(self, session_id: str, rpe: int | None = None, notes: str | None = None) -> BullpenSession:
        return self.lifecycle.complete(session_id, rpe=rpe, notes=notes)

    def list_for_assignment(self, assignment_id: str) -> list[BullpenSession]:
        return self.lifecycle.list_for_assignment(assignment_id)

    def list_active_for_assignment(self, assignment_id: str) -> list[BullpenSession]:
        return self.lifecycle.list_active(assignment_id)

    def resolve_prior(self, assignment_id: str, event_status: str | None = None) -> PriorSessionResolution:
        return self.lifecycle.resolve_prior(assignment_id, event_status=event_status)

    def start_for_event(self, event_id: str, request: StartSessionRequest) -> StartSessionResponse:
        if self._lookup is None:
            raise RuntimeError("start_for_event requires an assignment lookup")
        return self.lifecycle.start_for_event(event_id, request, self._lookup)

    def view_state(self, session: BullpenSession) -> SessionViewState:
        return build_view_state(
            session,
            default_denominator=settings.default_progress_denominator,
            recent_limit=settings.recent_throws_limit,
        )

    def summary_view(self, session_id: str) -> SessionSummaryView:
        return build_summary_view(self.require_session(session_id))

    def dispatch_notifications(self) -> int:
        return self.outbox.drain()
