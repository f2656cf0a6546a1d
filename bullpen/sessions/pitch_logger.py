"""Pitch logging.

Validates a single pitch capture, matches it against the session script,
and persists the extended pitch log together with the recomputed summary in
one revision-guarded write.
"""

from __future__ import annotations

import math
import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from loguru import logger

from bullpen.sessions.errors import NotFoundError, SessionStateError, ValidationError
from bullpen.sessions.pitch_types import resolve_pitch_type
from bullpen.sessions.repository import SessionRepository
from bullpen.sessions.schemas import DEFAULT_INTENSITY, BullpenSession, Pitch, PitchCapture, ScriptItem
from bullpen.sessions.summary import compute_summary


def validate_capture(capture: PitchCapture) -> None:
    """Reject captures missing velocity or actual zone.

    Raises:
        ValidationError: If a required field is missing or velocity is not finite
    """
    if capture.velocity is None:
        raise ValidationError("velocity")
    if not math.isfinite(capture.velocity):
        raise ValidationError("velocity", f"Velocity must be a finite number, got {capture.velocity}")
    if capture.actual_zone is None or not capture.actual_zone.strip():
        raise ValidationError("actualZone")


def prescription_for(session: BullpenSession, index: int) -> ScriptItem | None:
    """Script slot for the pitch at ``index``; None past the end of the script."""
    if index < len(session.script):
        return session.script[index]
    return None


def build_pitch(
    session: BullpenSession,
    capture: PitchCapture,
    now: datetime | None = None,
    id_factory: Callable[[], str] | None = None,
) -> Pitch:
    """Build the next pitch of the session from a validated capture."""
    index = len(session.pitches)
    prescription = prescription_for(session, index)

    # An unscripted pitch has no target to miss, so it counts as compliant
    compliance = prescription.target_zone == capture.actual_zone if prescription is not None else True

    return Pitch(
        id=id_factory() if id_factory else f"p_{uuid.uuid4().hex}",
        number=index + 1,
        pitch_type=resolve_pitch_type(capture.pitch_type_value),
        velocity=capture.velocity,
        target_zone=prescription.target_zone if prescription is not None else capture.actual_zone,
        actual_zone=capture.actual_zone,
        compliance=compliance,
        strike=capture.strike,
        intensity=capture.intensity or DEFAULT_INTENSITY,
        note=capture.note,
        timestamp=now or datetime.now(timezone.utc),
    )


class PitchLogger:
    """Append pitches to a live session."""

    def __init__(self, repository: SessionRepository) -> None:
        self._repository = repository

    def log_pitch(self, session_id: str, capture: PitchCapture) -> BullpenSession:
        """Record one pitch and return the updated session.

        Args:
            session_id: Session to log into
            capture: Candidate pitch (velocity and actual zone required)

        Returns:
            Session as stored after the write

        Raises:
            ValidationError: If the capture is incomplete (nothing is read or written)
            NotFoundError: If the session does not exist
            SessionStateError: If the session is already completed
            ConcurrentUpdateError: If another write landed since the session was read
            PersistenceError: If the storage write fails
        """
        validate_capture(capture)

        session = self._repository.get_by_id(session_id)
        if session is None:
            raise NotFoundError(session_id)
        if session.status != "in_progress":
            raise SessionStateError(f"Bullpen session {session_id} is {session.status}, cannot log pitches")

        pitch = build_pitch(session, capture)
        pitches = [*session.pitches, pitch]
        summary = compute_summary(pitches, total_pitch_prescribed=session.summary.total_pitch_prescribed)

        updated = self._repository.update(
            session_id,
            {"pitches": pitches, "summary": summary},
            expected_revision=session.revision,
        )
        logger.info(
            "Pitch logged",
            session_id=session_id,
            pitch_number=pitch.number,
            compliance=pitch.compliance,
            strike=pitch.strike,
        )
        return updated
