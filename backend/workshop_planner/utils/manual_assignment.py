"""
Manual Workshop Assignment: admin override of a single team label

Lets an admin put a team in a specific (workshop, time slot) for label A or B
while keeping the plan invariants:

1. **Event ownership**: team registered, workshop and time slot belong to the event
2. **Category**: restricted workshops only take teams of that category
3. **Distinct labels**: A and B never share a workshop or a time slot
4. **Capacity**: headcount of the pair never exceeds max_capacity
5. **Label ordering**: a team gets label B only once it holds label A

Manual rows are marked assignment_type="manual". The next executed engine
run is a full replace and discards them. The read-check-write runs under the
same per-event lock as engine runs so the two never book the same seats.
"""

import logging
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from workshop_planner.models.workshop import Workshop
from workshop_planner.models.workshop_assignment import ASSIGNMENT_TYPE_MANUAL, WorkshopAssignment
from workshop_planner.models.workshop_time_slot import WorkshopTimeSlot
from workshop_planner.services.assignment_orchestrator import event_lock
from workshop_planner.services.assignment_types import SlotLabel
from workshop_planner.services.capacity_tracker import CapacityTracker
from workshop_planner.services.eligibility import is_eligible
from workshop_planner.services.plan_applier import load_assignment_inputs
from workshop_planner.services.preference_resolver import PreferenceResolver

logger = logging.getLogger(__name__)


class ManualAssignmentError(Exception):
    """Base exception for manual assignment errors"""
    pass


class ManualAssignmentValidationError(ManualAssignmentError):
    """Validation failed for manual assignment"""
    pass


def _other_label(label: SlotLabel) -> SlotLabel:
    return SlotLabel.B if label == SlotLabel.A else SlotLabel.A


def manual_assign(
    session: Session,
    event_id: int,
    team_id: int,
    workshop_id: int,
    time_slot_id: int,
    slot_label: SlotLabel,
    assigned_by: Optional[str] = None,
) -> WorkshopAssignment:
    """
    Create or update the team's assignment for slot_label.

    Raises:
        ManualAssignmentValidationError if any invariant would break
        SQLAlchemyError if the write fails (session rolled back)
    """
    workshop = session.get(Workshop, workshop_id)
    if not workshop or workshop.event_id != event_id:
        raise ManualAssignmentValidationError(f"Workshop {workshop_id} not found in event {event_id}")

    time_slot = session.get(WorkshopTimeSlot, time_slot_id)
    if not time_slot or time_slot.event_id != event_id:
        raise ManualAssignmentValidationError(f"Time slot {time_slot_id} not found in event {event_id}")

    with event_lock(event_id):
        return _assign_locked(session, event_id, team_id, workshop_id, time_slot_id, slot_label, assigned_by)


def _assign_locked(
    session: Session,
    event_id: int,
    team_id: int,
    workshop_id: int,
    time_slot_id: int,
    slot_label: SlotLabel,
    assigned_by: Optional[str],
) -> WorkshopAssignment:
    inputs = load_assignment_inputs(session, event_id)
    team = next((t for t in inputs.teams if t.team_id == team_id), None)
    if team is None:
        raise ManualAssignmentValidationError(f"Team {team_id} is not registered to event {event_id}")

    workshop_input = next(w for w in inputs.workshops if w.workshop_id == workshop_id)
    slot_input = next(s for s in inputs.time_slots if s.time_slot_id == time_slot_id)

    existing_rows = session.exec(select(WorkshopAssignment).where(WorkshopAssignment.event_id == event_id)).all()
    current: Optional[WorkshopAssignment] = None
    other: Optional[WorkshopAssignment] = None
    for row in existing_rows:
        if row.team_id != team_id:
            continue
        if row.assignment_slot == slot_label.value:
            current = row
        elif row.assignment_slot == _other_label(slot_label).value:
            other = row

    if slot_label == SlotLabel.B and other is None:
        raise ManualAssignmentValidationError(
            f"Team {team_id} has no workshop A assignment; assign label A before label B"
        )

    used_workshops = {other.workshop_id} if other else set()
    used_slots = {other.time_slot_id} if other else set()
    eligible, reason = is_eligible(team, workshop_input, slot_input, used_workshops, used_slots)
    if not eligible:
        raise ManualAssignmentValidationError(
            f"Cannot assign team {team_id} to workshop {workshop_id} / time slot {time_slot_id}: {reason}"
        )

    # Rebuild occupancy from what is stored, then move this team's seat
    headcounts: Dict[int, int] = {t.team_id: t.participant_count for t in inputs.teams}
    tracker = CapacityTracker(inputs.workshops, inputs.time_slots)
    current_reserved = False
    for row in existing_rows:
        reserved = tracker.reserve(row.workshop_id, row.time_slot_id, headcounts.get(row.team_id, 1))
        if row is current:
            current_reserved = reserved
    if current_reserved:
        tracker.release(current.workshop_id, current.time_slot_id, headcounts.get(team_id, 1))
    if not tracker.reserve(workshop_id, time_slot_id, team.participant_count):
        raise ManualAssignmentValidationError(
            f"Workshop {workshop_id} has {tracker.remaining(workshop_id, time_slot_id)} seats left in "
            f"time slot {time_slot_id}, team {team_id} needs {team.participant_count}"
        )

    rank = PreferenceResolver(inputs.preferences).rank_of(team_id, workshop_id)

    if current is None:
        current = WorkshopAssignment(
            event_id=event_id,
            team_id=team_id,
            workshop_id=workshop_id,
            time_slot_id=time_slot_id,
            assignment_slot=slot_label.value,
        )
    current.workshop_id = workshop_id
    current.time_slot_id = time_slot_id
    current.preference_matched = rank
    current.assignment_type = ASSIGNMENT_TYPE_MANUAL
    current.assigned_by = assigned_by
    current.assigned_at = datetime.utcnow()

    try:
        session.add(current)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception(
            "Failed to save manual assignment %s for team %d in event %d", slot_label.value, team_id, event_id
        )
        raise

    session.refresh(current)
    logger.info(
        "Event %d: team %d label %s manually set to workshop %d / time slot %d",
        event_id,
        team_id,
        slot_label.value,
        workshop_id,
        time_slot_id,
    )
    return current
