from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""


class BullpenSessionRecord(Base):
    """Bullpen session document.

    One row per live or historical bullpen. Identity and link fields are
    plain columns so they can be queried; the pitch log, frozen script and
    summary are JSON documents rewritten as a whole on every pitch.

    Schema:
    - id: UUID primary key
    - organization_id / team_id: owning organization and team
    - athlete_info / coach_info: denormalized user snapshots (JSON)
    - workout_assignment_id: linked training assignment (indexed)
    - calendar_event_id: linked calendar activity
    - status: in_progress | completed
    - pitches: ordered pitch log (JSON array)
    - script: frozen prescribed pitch script (JSON array)
    - summary: recomputed session summary (JSON object)
    - rpe / notes: session feedback captured at completion
    - revision: optimistic write counter, incremented on every update

    Sessions are never deleted.
    """

    __tablename__ = "bullpen_sessions"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    organization_id: Mapped[str] = mapped_column(String, nullable=False)
    team_id: Mapped[str] = mapped_column(String, nullable=False)
    athlete_info: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    coach_info: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    workout_assignment_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    calendar_event_id: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="in_progress")  # in_progress, completed
    pitches: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    script: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    summary: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    rpe: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    revision: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        Index("idx_bullpen_sessions_assignment_status", "workout_assignment_id", "status"),
    )
