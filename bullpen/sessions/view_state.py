"""Derived view state for live and finished sessions.

Pure functions over a session snapshot; nothing here is persisted.
"""

from __future__ import annotations

from bullpen.sessions.pitch_logger import prescription_for
from bullpen.sessions.schemas import (
    BullpenSession,
    Pitch,
    ScriptItem,
    SessionSummaryView,
    SessionViewState,
)
from bullpen.sessions.summary import percentage

DEFAULT_PROGRESS_DENOMINATOR = 30
DEFAULT_RECENT_THROWS = 5


def current_prescription(session: BullpenSession) -> ScriptItem | None:
    """Script slot the next pitch will be matched against; None once off-script."""
    return prescription_for(session, len(session.pitches))


def progress_pct(session: BullpenSession, default_denominator: int = DEFAULT_PROGRESS_DENOMINATOR) -> int:
    """Percentage of the script thrown.

    Open sessions have no script, so progress is measured against a default
    pitch count. Values above 100 are possible once a script is exceeded.
    """
    denominator = session.summary.total_pitch_prescribed or default_denominator
    return percentage(len(session.pitches), denominator)


def remaining_pitches(session: BullpenSession) -> int:
    return max(session.summary.total_pitch_prescribed - len(session.pitches), 0)


def recent_throws(session: BullpenSession, limit: int = DEFAULT_RECENT_THROWS) -> list[Pitch]:
    """Most recent pitches first."""
    if limit <= 0:
        return []
    return list(reversed(session.pitches[-limit:]))


def build_view_state(
    session: BullpenSession,
    default_denominator: int = DEFAULT_PROGRESS_DENOMINATOR,
    recent_limit: int = DEFAULT_RECENT_THROWS,
) -> SessionViewState:
    return SessionViewState(
        current_prescription=current_prescription(session),
        current_pitch_number=len(session.pitches) + 1,
        progress_pct=progress_pct(session, default_denominator),
        show_progress=session.is_scripted,
        remaining_pitches=remaining_pitches(session),
        recent_throws=recent_throws(session, recent_limit),
    )


def build_summary_view(session: BullpenSession) -> SessionSummaryView:
    """Read-only summary of a session (usually a completed one)."""
    return SessionSummaryView(
        session_id=session.id,
        status=session.status,
        athlete_info=session.athlete_info,
        summary=session.summary,
        pitches=list(session.pitches),
        rpe=session.rpe,
        notes=session.notes,
        started_at=session.started_at,
        completed_at=session.completed_at,
    )
