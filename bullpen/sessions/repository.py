"""Bullpen session persistence.

Single owner of session truth. Every read returns a fresh, disposable
snapshot; nothing is cached between calls.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractContextManager
from datetime import datetime, timezone
from typing import Any, Protocol

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bullpen.db.models import BullpenSessionRecord
from bullpen.db.session import get_session
from bullpen.sessions.errors import ConcurrentUpdateError, NotFoundError, PersistenceError
from bullpen.sessions.schemas import AthleteInfo, BullpenSession, Pitch, ScriptItem, SessionStatus, Summary

SessionScope = Callable[[], AbstractContextManager[Session]]

# Fields a partial update may touch; identity and links are immutable
_UPDATABLE_FIELDS = frozenset({"status", "pitches", "summary", "rpe", "notes", "completed_at"})


class SessionRepository(Protocol):
    """Storage contract consumed by the engine."""

    def create(self, session: BullpenSession) -> BullpenSession: ...

    def get_by_id(self, session_id: str) -> BullpenSession | None: ...

    def update(self, session_id: str, changes: dict[str, Any], expected_revision: int) -> BullpenSession: ...

    def query_by_assignment(self, assignment_id: str, status: SessionStatus | None = None) -> list[BullpenSession]: ...


def _dump_list(items: list[Pitch] | list[ScriptItem]) -> list[dict[str, Any]]:
    return [item.model_dump(mode="json", by_alias=True) for item in items]


def record_to_session(record: BullpenSessionRecord) -> BullpenSession:
    """Convert a stored row into a session snapshot."""
    return BullpenSession(
        id=record.id,
        organization_id=record.organization_id,
        team_id=record.team_id,
        athlete_info=AthleteInfo.model_validate(record.athlete_info),
        coach_info=AthleteInfo.model_validate(record.coach_info) if record.coach_info else None,
        workout_assignment_id=record.workout_assignment_id,
        calendar_event_id=record.calendar_event_id,
        status=record.status,
        pitches=[Pitch.model_validate(item) for item in record.pitches or []],
        script=[ScriptItem.model_validate(item) for item in record.script or []],
        summary=Summary.model_validate(record.summary or {}),
        rpe=record.rpe,
        notes=record.notes,
        revision=record.revision,
        started_at=record.started_at,
        completed_at=record.completed_at,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def session_to_record(session: BullpenSession) -> BullpenSessionRecord:
    """Convert a session snapshot into a new row."""
    return BullpenSessionRecord(
        id=session.id,
        organization_id=session.organization_id,
        team_id=session.team_id,
        athlete_info=session.athlete_info.model_dump(mode="json", by_alias=True),
        coach_info=session.coach_info.model_dump(mode="json", by_alias=True) if session.coach_info else None,
        workout_assignment_id=session.workout_assignment_id,
        calendar_event_id=session.calendar_event_id,
        status=session.status,
        pitches=_dump_list(session.pitches),
        script=_dump_list(session.script),
        summary=session.summary.model_dump(mode="json", by_alias=True),
        rpe=session.rpe,
        notes=session.notes,
        revision=session.revision,
        started_at=session.started_at,
        completed_at=session.completed_at,
    )


def _serialize_changes(changes: dict[str, Any]) -> dict[str, Any]:
    unknown = set(changes) - _UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

    values: dict[str, Any] = {}
    for field, value in changes.items():
        if field == "pitches":
            values[field] = _dump_list(value)
        elif field == "summary":
            values[field] = value.model_dump(mode="json", by_alias=True)
        else:
            values[field] = value
    return values


class SqlSessionRepository:
    """SQLAlchemy-backed session repository.

    Each call runs in its own transaction via the session scope, so a failed
    call never leaves a partial write behind.
    """

    def __init__(self, session_scope: SessionScope | None = None) -> None:
        self._session_scope = session_scope or get_session

    def _scope(self) -> AbstractContextManager[Session]:
        return self._session_scope()

    def create(self, session: BullpenSession) -> BullpenSession:
        try:
            with self._scope() as db:
                record = session_to_record(session)
                db.add(record)
                db.flush()
                db.refresh(record)
                created = record_to_session(record)
        except SQLAlchemyError as e:
            logger.error(f"Failed to create bullpen session {session.id}: {e}")
            raise PersistenceError(f"Failed to create bullpen session: {e}") from e

        logger.info(
            "Bullpen session created",
            session_id=created.id,
            workout_assignment_id=created.workout_assignment_id,
            script_length=len(created.script),
        )
        return created

    def get_by_id(self, session_id: str) -> BullpenSession | None:
        try:
            with self._scope() as db:
                record = db.execute(
                    select(BullpenSessionRecord)
                    .where(BullpenSessionRecord.id == session_id)
                    .execution_options(populate_existing=True)
                ).scalar_one_or_none()
                return record_to_session(record) if record is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to load bullpen session {session_id}: {e}")
            raise PersistenceError(f"Failed to load bullpen session: {e}") from e

    def update(self, session_id: str, changes: dict[str, Any], expected_revision: int) -> BullpenSession:
        """Apply a partial update as one write, guarded by the revision read.

        Args:
            session_id: Session to update
            changes: Field -> new value (domain objects, serialized here)
            expected_revision: Revision the caller's snapshot was read at

        Returns:
            The updated session as stored

        Raises:
            NotFoundError: If the session does not exist
            ConcurrentUpdateError: If the session moved past expected_revision
            PersistenceError: If the storage write fails
        """
        values = _serialize_changes(changes)
        values["revision"] = expected_revision + 1
        values["updated_at"] = datetime.now(timezone.utc)

        try:
            with self._scope() as db:
                result = db.execute(
                    update(BullpenSessionRecord)
                    .where(BullpenSessionRecord.id == session_id)
                    .where(BullpenSessionRecord.revision == expected_revision)
                    .values(**values)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    exists = db.execute(
                        select(BullpenSessionRecord.id).where(BullpenSessionRecord.id == session_id)
                    ).scalar_one_or_none()
                    if exists is None:
                        raise NotFoundError(session_id)
                    raise ConcurrentUpdateError(session_id, expected_revision)

                record = db.execute(
                    select(BullpenSessionRecord)
                    .where(BullpenSessionRecord.id == session_id)
                    .execution_options(populate_existing=True)
                ).scalar_one()
                return record_to_session(record)
        except SQLAlchemyError as e:
            logger.error(f"Failed to update bullpen session {session_id}: {e}")
            raise PersistenceError(f"Failed to update bullpen session: {e}") from e

    def query_by_assignment(self, assignment_id: str, status: SessionStatus | None = None) -> list[BullpenSession]:
        stmt = select(BullpenSessionRecord).where(BullpenSessionRecord.workout_assignment_id == assignment_id)
        if status is not None:
            stmt = stmt.where(BullpenSessionRecord.status == status)
        stmt = stmt.order_by(BullpenSessionRecord.created_at).execution_options(populate_existing=True)

        try:
            with self._scope() as db:
                records = db.execute(stmt).scalars().all()
                return [record_to_session(record) for record in records]
        except SQLAlchemyError as e:
            logger.error(f"Failed to query bullpen sessions for assignment {assignment_id}: {e}")
            raise PersistenceError(f"Failed to query bullpen sessions: {e}") from e
