"""Bullpen session schemas (Pydantic).

Domain and API contract models. Field names are snake_case in Python and
camelCase on the wire and in stored documents.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SessionStatus = Literal["in_progress", "completed"]

DEFAULT_PITCH_TYPE = "4-Seam"
DEFAULT_TARGET_ZONE = "Global"
DEFAULT_INTENSITY = "game_intensity"


class CamelModel(BaseModel):
    """Base model serializing to camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PitchTypeOption(CamelModel):
    """One entry of the pitch type catalog."""

    id: str
    label: str
    value: str


class ScriptItem(CamelModel):
    """One prescribed pitch slot of a session script."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    pitch_type: str = DEFAULT_PITCH_TYPE
    target_zone: str = DEFAULT_TARGET_ZONE


class Pitch(CamelModel):
    """One recorded throw."""

    id: str
    number: int
    pitch_type: PitchTypeOption
    velocity: float | None = None
    target_zone: str
    actual_zone: str | None = None
    compliance: bool
    strike: bool
    intensity: str = DEFAULT_INTENSITY
    note: str | None = None
    timestamp: datetime


class Summary(CamelModel):
    """Session performance summary, recomputed over the whole pitch log."""

    total_pitch_prescribed: int = 0
    total_pitch_completed: int = 0
    compliance: int = 0
    avg_velocity: float = 0
    top_velocity: float = 0
    strike_pct: int = 0


class AthleteInfo(CamelModel):
    """Snapshot of the user a session belongs to."""

    user_id: str
    name: str = "Athlete"
    email: str = ""
    profile_image_url: str = ""


class BullpenSession(CamelModel):
    """Authoritative session snapshot as read from storage."""

    id: str
    organization_id: str
    team_id: str
    athlete_info: AthleteInfo
    coach_info: AthleteInfo | None = None
    workout_assignment_id: str | None = None
    calendar_event_id: str | None = None
    status: SessionStatus = "in_progress"
    pitches: list[Pitch] = Field(default_factory=list)
    script: list[ScriptItem] = Field(default_factory=list)
    summary: Summary = Field(default_factory=Summary)
    rpe: int | None = None
    notes: str | None = None
    revision: int = 1
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_scripted(self) -> bool:
        return len(self.script) > 0


class SessionDraft(CamelModel):
    """Identity and context fields needed to open a new session."""

    organization_id: str
    team_id: str
    athlete_info: AthleteInfo
    coach_info: AthleteInfo | None = None
    workout_assignment_id: str | None = None
    calendar_event_id: str | None = None
    script: list[ScriptItem] = Field(default_factory=list)


class PitchCapture(CamelModel):
    """Candidate pitch as entered by the user.

    Required fields are checked by the pitch logger so that a missing value
    surfaces as a domain validation error rather than a parsing failure.
    """

    pitch_type_value: str | None = None
    velocity: float | None = None
    actual_zone: str | None = None
    strike: bool = False
    intensity: str | None = None
    note: str | None = None


class CompleteSessionRequest(CamelModel):
    """Optional session feedback recorded at completion."""

    rpe: int | None = Field(default=None, ge=1, le=10)
    notes: str | None = None


class StartSessionRequest(CamelModel):
    """Caller context for starting a bullpen from a calendar event."""

    organization_id: str
    team_id: str = "default-team"
    athlete_info: AthleteInfo
    coach_info: AthleteInfo | None = None


class SessionViewState(CamelModel):
    """Derived, read-only state for rendering a live session."""

    current_prescription: ScriptItem | None
    current_pitch_number: int
    progress_pct: int
    show_progress: bool
    remaining_pitches: int
    recent_throws: list[Pitch]


class SessionWithViewState(CamelModel):
    """Session snapshot together with its derived view state."""

    session: BullpenSession
    view: SessionViewState


class SessionSummaryView(CamelModel):
    """Read-only summary view of a session."""

    session_id: str
    status: SessionStatus
    athlete_info: AthleteInfo
    summary: Summary
    pitches: list[Pitch]
    rpe: int | None = None
    notes: str | None = None
    started_at: datetime
    completed_at: datetime | None = None


class StartSessionResponse(CamelModel):
    """Outcome of starting a bullpen from a calendar event."""

    action: Literal["created", "resume", "summary"]
    session: BullpenSession
