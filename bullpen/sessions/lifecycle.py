"""Bullpen session lifecycle.

Creates, resumes and completes sessions. A session is opened when an
athlete starts a scheduled bullpen, stays ``in_progress`` while pitches are
logged, and moves to ``completed`` exactly once. Sessions are never deleted.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal, Protocol

from loguru import logger

from bullpen.sessions.errors import NotFoundError, SessionStateError, ValidationError
from bullpen.sessions.notifications import EventStatus, StatusNotification, StatusOutbox
from bullpen.sessions.repository import SessionRepository
from bullpen.sessions.schemas import (
    BullpenSession,
    SessionDraft,
    StartSessionRequest,
    StartSessionResponse,
    Summary,
)
from bullpen.sessions.script_builder import build_script, prescriptions_from_payload, workout_from_payload

WORKOUT_ASSIGNMENT_SOURCE = "workout_assignment"


class AssignmentLookup(Protocol):
    """Read side of the external event / assignment / workout directory."""

    def get_event(self, event_id: str) -> dict[str, Any] | None: ...

    def get_assignment(self, assignment_id: str) -> dict[str, Any] | None: ...

    def get_workout(self, workout_id: str, organization_id: str | None = None) -> dict[str, Any] | None: ...


@dataclass(frozen=True)
class PriorSessionResolution:
    """What the caller should do before starting a session for an assignment.

    Attributes:
        action: "summary" (show the finished session), "resume" (reopen the
            active session) or "start" (no usable prior session)
        session: The prior session for "summary" and "resume", else None
    """

    action: Literal["start", "resume", "summary"]
    session: BullpenSession | None = None


def new_session(draft: SessionDraft, now: datetime | None = None) -> BullpenSession:
    """Build a fresh in-progress session from a draft with a zeroed summary."""
    return BullpenSession(
        id=str(uuid.uuid4()),
        organization_id=draft.organization_id,
        team_id=draft.team_id,
        athlete_info=draft.athlete_info,
        coach_info=draft.coach_info,
        workout_assignment_id=draft.workout_assignment_id,
        calendar_event_id=draft.calendar_event_id,
        status="in_progress",
        pitches=[],
        script=list(draft.script),
        summary=Summary(total_pitch_prescribed=len(draft.script)),
        revision=1,
        started_at=now or datetime.now(timezone.utc),
    )


def validate_draft(draft: SessionDraft) -> None:
    """Reject drafts missing the owning organization or athlete.

    Raises:
        ValidationError: If a required identity field is blank
    """
    if not draft.organization_id.strip():
        raise ValidationError("organizationId")
    if not draft.athlete_info.user_id.strip():
        raise ValidationError("athleteInfo.userId")


class SessionLifecycleManager:
    """Open, resume and complete bullpen sessions.

    Calendar status notifications go through the outbox. With
    ``auto_dispatch`` the outbox is drained right after each committed
    write; otherwise the caller drains it (e.g. from a background task).
    """

    def __init__(self, repository: SessionRepository, outbox: StatusOutbox, *, auto_dispatch: bool = True) -> None:
        self._repository = repository
        self._outbox = outbox
        self._auto_dispatch = auto_dispatch

    def _notify(self, session: BullpenSession, status: EventStatus) -> None:
        if not session.calendar_event_id:
            return
        self._outbox.enqueue(StatusNotification(event_id=session.calendar_event_id, status=status, session_id=session.id))
        if self._auto_dispatch:
            self._outbox.drain()

    def list_for_assignment(self, assignment_id: str) -> list[BullpenSession]:
        return self._repository.query_by_assignment(assignment_id)

    def list_active(self, assignment_id: str) -> list[BullpenSession]:
        return self._repository.query_by_assignment(assignment_id, status="in_progress")

    def resolve_prior(self, assignment_id: str, event_status: str | None = None) -> PriorSessionResolution:
        """Decide between summary, resume and start for an assignment.

        A completed session only routes to the summary when the linked
        calendar activity is itself completed; otherwise an active session
        is surfaced for resuming.
        """
        sessions = self._repository.query_by_assignment(assignment_id)

        if event_status == "completed":
            completed = next((s for s in sessions if s.status == "completed"), None)
            if completed is not None:
                logger.info(f"Assignment {assignment_id} already completed in session {completed.id}")
                return PriorSessionResolution(action="summary", session=completed)

        active = next((s for s in sessions if s.status == "in_progress"), None)
        if active is not None:
            logger.info(f"Found active bullpen session {active.id} for assignment {assignment_id}")
            return PriorSessionResolution(action="resume", session=active)

        return PriorSessionResolution(action="start")

    def create(self, draft: SessionDraft) -> BullpenSession:
        """Persist a new in-progress session.

        Raises:
            ValidationError: If the draft lacks organization or athlete
            SessionStateError: If the assignment already has an active session
            PersistenceError: If the storage write fails
        """
        validate_draft(draft)

        if draft.workout_assignment_id:
            active = self.list_active(draft.workout_assignment_id)
            if active:
                raise SessionStateError(
                    f"Assignment {draft.workout_assignment_id} already has an active bullpen session ({active[0].id})"
                )

        created = self._repository.create(new_session(draft))
        self._notify(created, "in_progress")
        return created

    def complete(self, session_id: str, rpe: int | None = None, notes: str | None = None) -> BullpenSession:
        """Mark a session completed, recording optional feedback.

        Raises:
            NotFoundError: If the session does not exist
            SessionStateError: If the session is already completed
            ConcurrentUpdateError: If another write landed since the session was read
            PersistenceError: If the storage write fails
        """
        session = self._repository.get_by_id(session_id)
        if session is None:
            raise NotFoundError(session_id)
        if session.status == "completed":
            raise SessionStateError(f"Bullpen session {session_id} is already completed")

        changes: dict[str, Any] = {"status": "completed", "completed_at": datetime.now(timezone.utc)}
        if rpe is not None:
            changes["rpe"] = rpe
        if notes is not None:
            changes["notes"] = notes

        completed = self._repository.update(session_id, changes, expected_revision=session.revision)
        logger.info(
            "Bullpen session completed",
            session_id=session_id,
            pitches=completed.summary.total_pitch_completed,
            prescribed=completed.summary.total_pitch_prescribed,
        )
        self._notify(completed, "completed")
        return completed

    def start_for_event(self, event_id: str, request: StartSessionRequest, lookup: AssignmentLookup) -> StartSessionResponse:
        """Start (or resume) the bullpen scheduled by a calendar event.

        Follows event -> workout assignment -> workout, routes to an existing
        session when there is one, and otherwise derives the script and
        creates a new session.

        Raises:
            NotFoundError: If the event does not exist
            UpstreamServiceError: If the directory service cannot be read
        """
        event = lookup.get_event(event_id)
        if event is None:
            raise NotFoundError(event_id, resource="Calendar event")

        assignment: dict[str, Any] | None = None
        workout: dict[str, Any] | None = None
        source_id = event.get("sourceId")
        if source_id and event.get("sourceType") == WORKOUT_ASSIGNMENT_SOURCE:
            assignment = lookup.get_assignment(str(source_id))
            if assignment and assignment.get("workoutId"):
                workout = lookup.get_workout(str(assignment["workoutId"]), event.get("organizationId"))

        assignment_id = None
        if assignment is not None:
            assignment_id = str(assignment.get("_id") or assignment.get("id") or source_id)
            resolution = self.resolve_prior(assignment_id, event_status=event.get("status"))
            if resolution.action == "summary" and resolution.session is not None:
                return StartSessionResponse(action="summary", session=resolution.session)
            if resolution.action == "resume" and resolution.session is not None:
                return StartSessionResponse(action="resume", session=resolution.session)

        script = build_script(
            prescriptions_from_payload(assignment.get("prescriptions") if assignment else None),
            workout_from_payload(workout),
        )
        draft = SessionDraft(
            organization_id=request.organization_id,
            team_id=request.team_id,
            athlete_info=request.athlete_info,
            coach_info=request.coach_info,
            workout_assignment_id=assignment_id,
            calendar_event_id=event_id,
            script=script,
        )
        return StartSessionResponse(action="created", session=self.create(draft))
