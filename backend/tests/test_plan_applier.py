"""
Tests for loading engine inputs from the database and persisting plans.
"""

from datetime import datetime

import pytest
from sqlmodel import Session, select

from workshop_planner.models import (
    ASSIGNMENT_TYPE_ALGORITHM,
    ASSIGNMENT_TYPE_MANUAL,
    Event,
    EventRegistration,
    RegistrationStatus,
    Team,
    Workshop,
    WorkshopAssignment,
)
from workshop_planner.services.assignment_orchestrator import (
    EventNotFound,
    clear_workshop_assignments,
    run_workshop_assignment,
)
from workshop_planner.services.assignment_types import AssignmentValidationError
from workshop_planner.services.plan_applier import (
    apply_plan,
    clear_assignments,
    list_assignments,
    load_assignment_inputs,
    persisted_stats,
)


def test_load_inputs_builds_fifo_roster_with_headcounts(session: Session, event_setup):
    inputs = load_assignment_inputs(session, event_setup["event"].id)

    assert [t.name for t in inputs.teams] == ["Alpha", "Bravo", "Charlie"]
    assert [t.participant_count for t in inputs.teams] == [2, 3, 1]
    assert all(t.category == "junior" for t in inputs.teams)

    # Workshops ordered by name, slots by number
    assert [w.name for w in inputs.workshops] == ["Coding", "Design", "Robotics"]
    assert [s.slot_number for s in inputs.time_slots] == [1, 2]

    workshops = event_setup["workshops"]
    teams = event_setup["teams"]
    assert inputs.preferences == {
        teams["Alpha"].id: [workshops["Robotics"].id, workshops["Coding"].id],
        teams["Bravo"].id: [workshops["Robotics"].id],
    }


def test_load_inputs_skips_cancelled_registrations(session: Session, event_setup):
    event = event_setup["event"]
    late = Team(name="Delta")
    session.add(late)
    session.commit()
    session.add(
        EventRegistration(
            event_id=event.id,
            team_id=late.id,
            participant_count=5,
            registration_status=RegistrationStatus.cancelled,
        )
    )
    # A cancelled extra registration does not change Alpha's headcount
    session.add(
        EventRegistration(
            event_id=event.id,
            team_id=event_setup["teams"]["Alpha"].id,
            participant_count=4,
            registration_status=RegistrationStatus.cancelled,
        )
    )
    session.commit()

    inputs = load_assignment_inputs(session, event.id)
    assert [t.name for t in inputs.teams] == ["Alpha", "Bravo", "Charlie"]
    assert inputs.teams[0].participant_count == 2


def test_general_category_workshop_is_unrestricted(session: Session, event_setup):
    workshop = event_setup["workshops"]["Design"]
    workshop.category = "general"
    session.add(workshop)
    robotics = event_setup["workshops"]["Robotics"]
    robotics.category = "senior"
    session.add(robotics)
    session.commit()

    inputs = load_assignment_inputs(session, event_setup["event"].id)
    by_name = {w.name: w for w in inputs.workshops}
    assert by_name["Design"].category is None
    assert by_name["Robotics"].category == "senior"


def test_dry_run_persists_nothing(session: Session, event_setup):
    event = event_setup["event"]
    result = run_workshop_assignment(session, event.id, dry_run=True)

    assert result.dry_run is True
    assert result.persisted_count == 0
    assert result.plan.stats.fully_assigned == 3
    assert list_assignments(session, event.id) == []


def test_execute_persists_the_previewed_plan(session: Session, event_setup):
    event = event_setup["event"]
    preview = run_workshop_assignment(session, event.id, dry_run=True)
    executed = run_workshop_assignment(session, event.id, dry_run=False, assigned_by="admin@example.org")

    assert executed.plan.model_dump_json() == preview.plan.model_dump_json()
    assert executed.persisted_count == 6

    rows = list_assignments(session, event.id)
    assert len(rows) == 6
    assert {(r.team_id, r.assignment_slot, r.workshop_id, r.time_slot_id, r.preference_matched) for r in rows} == {
        (a.team_id, a.slot_label.value, a.workshop_id, a.time_slot_id, a.preference_matched)
        for a in preview.plan.assignments
    }
    assert all(r.assignment_type == ASSIGNMENT_TYPE_ALGORITHM for r in rows)
    assert all(r.assigned_by == "admin@example.org" for r in rows)


def test_event_setup_plan_details(session: Session, event_setup):
    teams = event_setup["teams"]
    workshops = event_setup["workshops"]
    plan = run_workshop_assignment(session, event_setup["event"].id).plan
    by_team = {r.team_id: r for r in plan.results}

    alpha = by_team[teams["Alpha"].id]
    assert (alpha.workshop_a.workshop_id, alpha.workshop_a.slot_number) == (workshops["Robotics"].id, 1)
    assert (alpha.workshop_b.workshop_id, alpha.workshop_b.slot_number) == (workshops["Coding"].id, 2)

    # Bravo (3 people) no longer fits Robotics slot 1 after Alpha (2 of 4)
    bravo = by_team[teams["Bravo"].id]
    assert (bravo.workshop_a.workshop_id, bravo.workshop_a.slot_number) == (workshops["Robotics"].id, 2)
    assert bravo.workshop_b.preference_matched is None
    assert [e.code for e in bravo.errors] == ["PREFERENCE_FALLBACK"]

    charlie = by_team[teams["Charlie"].id]
    assert not charlie.ranked
    assert charlie.errors == []

    hist = {b.preference: b.count for b in plan.stats.preference_stats}
    assert hist[1] == 2
    assert hist[2] == 1


def test_execute_replaces_previous_assignments(session: Session, event_setup):
    event = event_setup["event"]
    run_workshop_assignment(session, event.id, dry_run=False, assigned_by="first")
    run_workshop_assignment(session, event.id, dry_run=False, assigned_by="second")

    rows = list_assignments(session, event.id)
    assert len(rows) == 6
    assert {r.assigned_by for r in rows} == {"second"}


def test_apply_plan_also_removes_manual_rows(session: Session, event_setup):
    event = event_setup["event"]
    teams = event_setup["teams"]
    session.add(
        WorkshopAssignment(
            event_id=event.id,
            team_id=teams["Charlie"].id,
            workshop_id=event_setup["workshops"]["Design"].id,
            time_slot_id=event_setup["slots"][0].id,
            assignment_slot="A",
            assignment_type=ASSIGNMENT_TYPE_MANUAL,
        )
    )
    session.commit()

    plan = run_workshop_assignment(session, event.id).plan
    apply_plan(session, event.id, plan)

    rows = list_assignments(session, event.id)
    assert all(r.assignment_type == ASSIGNMENT_TYPE_ALGORITHM for r in rows)


def test_clear_then_stats_show_everyone_unassigned(session: Session, event_setup):
    event = event_setup["event"]
    run_workshop_assignment(session, event.id, dry_run=False)
    assert persisted_stats(session, event.id).fully_assigned == 3

    deleted = clear_workshop_assignments(session, event.id)
    assert deleted == 6

    stats = persisted_stats(session, event.id)
    assert stats.unassigned == stats.total_teams == 3
    assert all(b.count == 0 for b in stats.preference_stats)

    # Clearing an already empty event is a no-op
    assert clear_assignments(session, event.id) == 0


def test_clear_does_not_touch_other_events(session: Session, event_setup):
    other = Event(name="Other Event")
    session.add(other)
    session.commit()

    run_workshop_assignment(session, event_setup["event"].id, dry_run=False)
    assert clear_workshop_assignments(session, other.id) == 0
    assert len(list_assignments(session, event_setup["event"].id)) == 6


def test_unknown_event_raises(session: Session):
    with pytest.raises(EventNotFound):
        run_workshop_assignment(session, 999)
    with pytest.raises(EventNotFound):
        clear_workshop_assignments(session, 999)


def test_event_without_time_slots_is_rejected(session: Session):
    event = Event(name="Unscheduled")
    session.add(event)
    session.commit()
    session.add(Workshop(event_id=event.id, name="Lonely", max_capacity=3))
    session.commit()

    with pytest.raises(AssignmentValidationError):
        run_workshop_assignment(session, event.id, dry_run=False)
    assert session.exec(select(WorkshopAssignment)).all() == []
