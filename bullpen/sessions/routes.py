"""Bullpen session API routes."""

from __future__ import annotations

from functools import lru_cache
from typing import NoReturn

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from loguru import logger

from bullpen.integrations.directory_client import CalendarEventClient, DirectoryClient
from bullpen.sessions.errors import (
    BullpenError,
    ConcurrentUpdateError,
    NotFoundError,
    PersistenceError,
    SessionStateError,
    UpstreamServiceError,
    ValidationError,
)
from bullpen.sessions.repository import SqlSessionRepository
from bullpen.sessions.schemas import (
    BullpenSession,
    CompleteSessionRequest,
    PitchCapture,
    SessionDraft,
    SessionSummaryView,
    SessionWithViewState,
    StartSessionRequest,
    StartSessionResponse,
)
from bullpen.sessions.service import BullpenSessionEngine
from bullpen.sessions.view_state import build_summary_view

router = APIRouter(prefix="/bullpen-sessions", tags=["bullpen-sessions"])


@lru_cache(maxsize=1)
def _calendar_client() -> CalendarEventClient:
    return CalendarEventClient()


@lru_cache(maxsize=1)
def _directory_client() -> DirectoryClient:
    return DirectoryClient()


def get_bullpen_engine() -> BullpenSessionEngine:
    """FastAPI dependency building the engine for one request.

    Notifications are not auto-dispatched; routes drain the outbox as a
    background task once the response is ready.
    """
    return BullpenSessionEngine(
        SqlSessionRepository(),
        _calendar_client(),
        _directory_client(),
        auto_dispatch=False,
    )


def _raise_http(e: BullpenError) -> NoReturn:
    """Translate a domain error into an HTTP error."""
    if isinstance(e, ValidationError):
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    if isinstance(e, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    if isinstance(e, (ConcurrentUpdateError, SessionStateError)):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    if isinstance(e, UpstreamServiceError):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e
    if isinstance(e, PersistenceError):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Session storage unavailable") from e
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)) from e


@router.post("", response_model=BullpenSession, status_code=status.HTTP_201_CREATED)
def create_session(
    draft: SessionDraft,
    background_tasks: BackgroundTasks,
    engine: BullpenSessionEngine = Depends(get_bullpen_engine),
) -> BullpenSession:
    """Create a bullpen session from a draft carrying a pre-built script."""
    try:
        session = engine.create_session(draft)
    except BullpenError as e:
        logger.warning(f"Failed to create bullpen session: {e}")
        _raise_http(e)
    background_tasks.add_task(engine.dispatch_notifications)
    return session


@router.get("", response_model=list[BullpenSession])
def list_sessions(
    workout_assignment_id: str | None = Query(default=None, alias="workoutAssignmentId"),
    engine: BullpenSessionEngine = Depends(get_bullpen_engine),
) -> list[BullpenSession]:
    """List every session of an assignment (empty without an assignment id)."""
    if not workout_assignment_id:
        return []
    try:
        return engine.list_for_assignment(workout_assignment_id)
    except BullpenError as e:
        _raise_http(e)


@router.get("/active", response_model=list[BullpenSession])
def list_active_sessions(
    workout_assignment_id: str = Query(alias="workoutAssignmentId"),
    engine: BullpenSessionEngine = Depends(get_bullpen_engine),
) -> list[BullpenSession]:
    try:
        return engine.list_active_for_assignment(workout_assignment_id)
    except BullpenError as e:
        _raise_http(e)


@router.post("/events/{event_id}/start", response_model=StartSessionResponse)
def start_session_for_event(
    event_id: str,
    request: StartSessionRequest,
    background_tasks: BackgroundTasks,
    engine: BullpenSessionEngine = Depends(get_bullpen_engine),
) -> StartSessionResponse:
    """Start, resume or summarize the bullpen scheduled by a calendar event.

    The ``action`` field tells the client where to go next: the live
    session ("created" / "resume") or the read-only summary ("summary").
    """
    try:
        result = engine.start_for_event(event_id, request)
    except BullpenError as e:
        logger.warning(f"Failed to start bullpen for event {event_id}: {e}")
        _raise_http(e)
    background_tasks.add_task(engine.dispatch_notifications)
    return result


@router.get("/{session_id}", response_model=SessionWithViewState)
def get_session(
    session_id: str,
    engine: BullpenSessionEngine = Depends(get_bullpen_engine),
) -> SessionWithViewState:
    try:
        session = engine.require_session(session_id)
    except BullpenError as e:
        _raise_http(e)
    return SessionWithViewState(session=session, view=engine.view_state(session))


@router.post("/{session_id}/pitch", response_model=SessionWithViewState)
def log_pitch(
    session_id: str,
    capture: PitchCapture,
    engine: BullpenSessionEngine = Depends(get_bullpen_engine),
) -> SessionWithViewState:
    """Log one pitch and return the updated session with its view state."""
    try:
        session = engine.log_pitch(session_id, capture)
    except BullpenError as e:
        logger.warning(f"Failed to log pitch for bullpen session {session_id}: {e}")
        _raise_http(e)
    return SessionWithViewState(session=session, view=engine.view_state(session))


@router.post("/{session_id}/complete", response_model=SessionSummaryView)
def complete_session(
    session_id: str,
    background_tasks: BackgroundTasks,
    request: CompleteSessionRequest | None = None,
    engine: BullpenSessionEngine = Depends(get_bullpen_engine),
) -> SessionSummaryView:
    """Complete a session and return its read-only summary."""
    feedback = request or CompleteSessionRequest()
    try:
        completed = engine.complete_session(session_id, rpe=feedback.rpe, notes=feedback.notes)
    except BullpenError as e:
        logger.warning(f"Failed to complete bullpen session {session_id}: {e}")
        _raise_http(e)
    # The completion is committed; the summary comes from the returned snapshot
    background_tasks.add_task(engine.dispatch_notifications)
    return build_summary_view(completed)


@router.get("/{session_id}/summary", response_model=SessionSummaryView)
def get_session_summary(
    session_id: str,
    engine: BullpenSessionEngine = Depends(get_bullpen_engine),
) -> SessionSummaryView:
    try:
        return engine.summary_view(session_id)
    except BullpenError as e:
        _raise_http(e)
