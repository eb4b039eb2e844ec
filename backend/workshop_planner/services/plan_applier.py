"""
Plan Applier: the storage side of workshop assignment.

- load_assignment_inputs: read roster/workshops/time slots/preferences for an
  event and turn them into plain engine inputs
- apply_plan: full replace of an event's assignments with a computed plan
- clear_assignments: delete every assignment of an event
- list_assignments / persisted_stats: read back what is stored

The engine never receives a session; everything here runs before or after it.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from workshop_planner.models.event_registration import EventRegistration, RegistrationStatus
from workshop_planner.models.team import Team
from workshop_planner.models.workshop import OPEN_CATEGORY, Workshop
from workshop_planner.models.workshop_assignment import ASSIGNMENT_TYPE_ALGORITHM, WorkshopAssignment
from workshop_planner.models.workshop_preference import WorkshopPreference
from workshop_planner.models.workshop_time_slot import WorkshopTimeSlot
from workshop_planner.services.assignment_stats import summarize_labels
from workshop_planner.services.assignment_types import (
    AssignmentPlan,
    AssignmentStats,
    TeamInput,
    TimeSlotInput,
    WorkshopInput,
)

logger = logging.getLogger(__name__)


@dataclass
class AssignmentInputs:
    teams: List[TeamInput] = field(default_factory=list)
    workshops: List[WorkshopInput] = field(default_factory=list)
    time_slots: List[TimeSlotInput] = field(default_factory=list)
    preferences: Dict[int, List[int]] = field(default_factory=dict)


def _workshop_category(workshop: Workshop) -> Optional[str]:
    if not workshop.category or workshop.category == OPEN_CATEGORY:
        return None
    return workshop.category


def load_roster(session: Session, event_id: int) -> List[TeamInput]:
    """
    Teams registered to the event, FIFO by first registration.

    Headcount is the sum of participant_count over the team's non-cancelled
    registrations (a missing/zero count counts as 1 participant).
    """
    registrations = session.exec(
        select(EventRegistration)
        .where(
            EventRegistration.event_id == event_id,
            EventRegistration.team_id.is_not(None),
            EventRegistration.registration_status != RegistrationStatus.cancelled.value,
        )
        .order_by(EventRegistration.created_at, EventRegistration.id)
    ).all()

    first_seen: Dict[int, datetime] = {}
    headcount: Dict[int, int] = defaultdict(int)
    for reg in registrations:
        first_seen.setdefault(reg.team_id, reg.created_at)
        headcount[reg.team_id] += reg.participant_count or 1

    if not first_seen:
        return []

    teams = session.exec(select(Team).where(Team.id.in_(list(first_seen.keys())))).all()
    teams_by_id = {t.id: t for t in teams}

    ordered_ids = sorted(first_seen, key=lambda team_id: (first_seen[team_id], team_id))
    return [
        TeamInput(
            team_id=team_id,
            name=teams_by_id[team_id].name,
            participant_count=headcount[team_id],
            category=teams_by_id[team_id].category,
        )
        for team_id in ordered_ids
        if team_id in teams_by_id
    ]


def load_assignment_inputs(session: Session, event_id: int) -> AssignmentInputs:
    teams = load_roster(session, event_id)

    workshops = session.exec(
        select(Workshop).where(Workshop.event_id == event_id).order_by(Workshop.name, Workshop.id)
    ).all()
    time_slots = session.exec(
        select(WorkshopTimeSlot)
        .where(WorkshopTimeSlot.event_id == event_id)
        .order_by(WorkshopTimeSlot.slot_number, WorkshopTimeSlot.id)
    ).all()

    roster_ids = {t.team_id for t in teams}
    preferences: Dict[int, List[int]] = defaultdict(list)
    rows = session.exec(
        select(WorkshopPreference)
        .where(WorkshopPreference.event_id == event_id)
        .order_by(WorkshopPreference.team_id, WorkshopPreference.preference_order)
    ).all()
    for pref in rows:
        # Preferences of teams no longer registered are ignored
        if pref.team_id in roster_ids:
            preferences[pref.team_id].append(pref.workshop_id)

    return AssignmentInputs(
        teams=teams,
        workshops=[
            WorkshopInput(
                workshop_id=w.id,
                name=w.name,
                max_capacity=w.max_capacity,
                category=_workshop_category(w),
            )
            for w in workshops
        ],
        time_slots=[
            TimeSlotInput(
                time_slot_id=s.id,
                slot_number=s.slot_number,
                start_time=s.start_time,
                end_time=s.end_time,
            )
            for s in time_slots
        ],
        preferences=dict(preferences),
    )


def _delete_event_assignments(session: Session, event_id: int) -> int:
    existing = session.exec(select(WorkshopAssignment).where(WorkshopAssignment.event_id == event_id)).all()
    for assignment in existing:
        session.delete(assignment)

    # Flush deletes before any insert so (event, team, slot) uniqueness holds
    session.flush()
    return len(existing)


def apply_plan(session: Session, event_id: int, plan: AssignmentPlan, assigned_by: Optional[str] = None) -> int:
    """
    Persist a plan as the event's complete set of assignments.

    Always a full replace: prior assignments (algorithm and manual) are
    deleted in the same transaction. Returns the number of rows inserted.
    """
    try:
        deleted = _delete_event_assignments(session, event_id)
        for planned in plan.assignments:
            session.add(
                WorkshopAssignment(
                    event_id=event_id,
                    team_id=planned.team_id,
                    workshop_id=planned.workshop_id,
                    time_slot_id=planned.time_slot_id,
                    assignment_slot=planned.slot_label.value,
                    preference_matched=planned.preference_matched,
                    assignment_type=ASSIGNMENT_TYPE_ALGORITHM,
                    assigned_by=assigned_by,
                )
            )
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to persist workshop assignment plan for event %d", event_id)
        raise

    logger.info(
        "Event %d: replaced %d workshop assignments with %d new ones", event_id, deleted, len(plan.assignments)
    )
    return len(plan.assignments)


def clear_assignments(session: Session, event_id: int) -> int:
    """Delete every persisted assignment of the event. Returns rows deleted."""
    try:
        deleted = _delete_event_assignments(session, event_id)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to clear workshop assignments for event %d", event_id)
        raise

    logger.info("Event %d: cleared %d workshop assignments", event_id, deleted)
    return deleted


def list_assignments(session: Session, event_id: int) -> List[WorkshopAssignment]:
    return session.exec(
        select(WorkshopAssignment)
        .where(WorkshopAssignment.event_id == event_id)
        .order_by(WorkshopAssignment.team_id, WorkshopAssignment.assignment_slot)
    ).all()


def persisted_stats(session: Session, event_id: int) -> AssignmentStats:
    """Statistics of what is stored now, over the event's current roster."""
    roster = load_roster(session, event_id)
    rows = list_assignments(session, event_id)
    return summarize_labels(
        [t.team_id for t in roster],
        [(row.team_id, row.assignment_slot, row.preference_matched) for row in rows],
    )
