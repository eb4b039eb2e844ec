from datetime import datetime, time, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from workshop_planner.database import get_session
from workshop_planner.main import app

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. All models imported before create_all() (see session_fixture)
# 4. Tables dropped after each test so every test starts empty
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a fresh schema"""
    from workshop_planner.models.event import Event  # noqa: F401
    from workshop_planner.models.event_registration import EventRegistration  # noqa: F401
    from workshop_planner.models.team import Team  # noqa: F401
    from workshop_planner.models.workshop import Workshop  # noqa: F401
    from workshop_planner.models.workshop_assignment import WorkshopAssignment  # noqa: F401
    from workshop_planner.models.workshop_preference import WorkshopPreference  # noqa: F401
    from workshop_planner.models.workshop_time_slot import WorkshopTimeSlot  # noqa: F401

    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override is set BEFORE TestClient() and stays in place for the whole test.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def event_setup(session: Session):
    """
    Event with:
      - 3 workshops (Robotics, Coding, Design), capacity 4 each
      - 2 time slots
      - 3 teams registered in order: Alpha (2 people), Bravo (3), Charlie (1)
      - Alpha ranks [Robotics, Coding]; Bravo ranks [Robotics]; Charlie unranked
    """
    from workshop_planner.models import (
        Event,
        EventRegistration,
        Team,
        Workshop,
        WorkshopPreference,
        WorkshopTimeSlot,
    )

    event = Event(name="Regional Final", workshop_preferences_open=True)
    session.add(event)
    session.commit()
    session.refresh(event)

    workshops = {}
    for name in ("Robotics", "Coding", "Design"):
        w = Workshop(event_id=event.id, name=name, max_capacity=4)
        session.add(w)
        workshops[name] = w
    slots = [
        WorkshopTimeSlot(event_id=event.id, slot_number=1, start_time=time(10, 0), end_time=time(11, 0)),
        WorkshopTimeSlot(event_id=event.id, slot_number=2, start_time=time(11, 30), end_time=time(12, 30)),
    ]
    for s in slots:
        session.add(s)

    teams = {}
    for name in ("Alpha", "Bravo", "Charlie"):
        t = Team(name=name, category="junior")
        session.add(t)
        teams[name] = t
    session.commit()

    base = datetime(2026, 3, 1, 9, 0)
    registrations = [
        ("Alpha", 2, 0),
        ("Bravo", 1, 1),
        ("Bravo", 2, 2),
        ("Charlie", 1, 3),
    ]
    for team_name, count, minutes in registrations:
        session.add(
            EventRegistration(
                event_id=event.id,
                team_id=teams[team_name].id,
                participant_count=count,
                created_at=base + timedelta(minutes=minutes),
            )
        )

    for order, wname in enumerate(["Robotics", "Coding"], start=1):
        session.add(
            WorkshopPreference(
                event_id=event.id, team_id=teams["Alpha"].id, workshop_id=workshops[wname].id, preference_order=order
            )
        )
    session.add(
        WorkshopPreference(
            event_id=event.id, team_id=teams["Bravo"].id, workshop_id=workshops["Robotics"].id, preference_order=1
        )
    )
    session.commit()

    for obj in list(workshops.values()) + slots + list(teams.values()):
        session.refresh(obj)

    return {"event": event, "workshops": workshops, "slots": slots, "teams": teams}
