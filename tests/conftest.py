"""Root conftest for all tests.

This file makes shared fixtures available across all test modules.
"""

from contextlib import contextmanager

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from bullpen.sessions.repository import SqlSessionRepository
from bullpen.sessions.schemas import AthleteInfo, ScriptItem, SessionDraft
from bullpen.sessions.service import BullpenSessionEngine
from fakes import FakeEventClient, FakeLookup


@pytest.fixture(scope="function")
def db_session(monkeypatch):
    """
    Provides a transactional in-memory SQLite DB session for tests.

    This fixture:
    - Creates an isolated in-memory SQLite database per test
    - Patches the engine getter to use it
    - Patches get_session() (where it is defined and where it is imported)
      to yield the test session
    - Rolls the outer transaction back at teardown
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
    )

    def mock_get_engine():
        return engine

    monkeypatch.setattr("bullpen.db.session._get_engine", mock_get_engine)
    monkeypatch.setattr("bullpen.db.session.get_engine", mock_get_engine)

    from bullpen.db.models import Base

    Base.metadata.create_all(engine)

    connection = engine.connect()
    transaction = connection.begin()

    test_session_local = sessionmaker(bind=connection, autocommit=False, autoflush=False)
    session = test_session_local()

    @contextmanager
    def mock_get_session():
        yield session

    import bullpen.db.session as session_module
    import bullpen.sessions.repository as repository_module

    monkeypatch.setattr(session_module, "get_session", mock_get_session)
    monkeypatch.setattr(repository_module, "get_session", mock_get_session)

    try:
        yield session
    finally:
        session.rollback()
        if transaction.is_active:
            transaction.rollback()
        session.close()
        connection.close()


@pytest.fixture
def repository(db_session):
    return SqlSessionRepository()


@pytest.fixture
def event_client():
    return FakeEventClient()


@pytest.fixture
def failing_event_client():
    return FakeEventClient(fail=True)


@pytest.fixture
def engine(repository, event_client):
    return BullpenSessionEngine(repository, event_client, FakeLookup())


@pytest.fixture
def athlete():
    return AthleteInfo(user_id="athlete_1", name="Sam Reliever", email="sam@example.com")


@pytest.fixture
def two_pitch_script():
    return [
        ScriptItem(id="s1", pitch_type="CT", target_zone="zone_3"),
        ScriptItem(id="s2", pitch_type="FF", target_zone="zone_5"),
    ]


@pytest.fixture
def make_draft(athlete):
    """Factory for session drafts."""

    def _make(script=None, assignment_id="assignment_1", event_id="event_1"):
        return SessionDraft(
            organization_id="org_1",
            team_id="team_1",
            athlete_info=athlete,
            workout_assignment_id=assignment_id,
            calendar_event_id=event_id,
            script=script or [],
        )

    return _make
