"""
Workshop Assignment Orchestrator

Runs the pipeline for one event:
1. Load engine inputs from the database
2. Run the matching engine (pure)
3. Dry run: return the plan untouched
   Execute: hand the plan to the applier (full replace)

Runs, clears and manual assignments for the same event are serialized with
an in-process per-event lock so no two writers plan against the same free
seats.
"""

import logging
import threading
from typing import Dict, Optional

from pydantic import BaseModel
from sqlmodel import Session

from workshop_planner.models.event import Event
from workshop_planner.services.assignment_types import AssignmentError, AssignmentPlan
from workshop_planner.services.matching_engine import run_assignment
from workshop_planner.services.plan_applier import apply_plan, clear_assignments, load_assignment_inputs

logger = logging.getLogger(__name__)


class EventNotFound(AssignmentError):
    """Event does not exist"""

    pass


class AssignmentRunResult(BaseModel):
    event_id: int
    dry_run: bool
    persisted_count: int
    plan: AssignmentPlan


_locks_guard = threading.Lock()
_event_locks: Dict[int, threading.Lock] = {}


def event_lock(event_id: int) -> threading.Lock:
    """
    Return the process-wide lock serializing assignment writes for event_id.

    One lock per event id is created on first use and kept for the life of
    the process; the map never shrinks, which is fine for a handful of events.
    """
    with _locks_guard:
        lock = _event_locks.get(event_id)
        if lock is None:
            lock = threading.Lock()
            _event_locks[event_id] = lock
        return lock


def _require_event(session: Session, event_id: int) -> Event:
    event = session.get(Event, event_id)
    if not event:
        raise EventNotFound(f"Event {event_id} not found")
    return event


def run_workshop_assignment(
    session: Session, event_id: int, dry_run: bool = True, assigned_by: Optional[str] = None
) -> AssignmentRunResult:
    """
    Compute the event's assignment plan and, unless dry_run, persist it.

    A dry run followed by an execute with unchanged data yields the same plan.

    Raises:
        EventNotFound: unknown event
        AssignmentValidationError: malformed event data (nothing persisted)
    """
    _require_event(session, event_id)

    with event_lock(event_id):
        inputs = load_assignment_inputs(session, event_id)
        plan = run_assignment(inputs.teams, inputs.workshops, inputs.time_slots, inputs.preferences)

        persisted = 0
        if not dry_run:
            persisted = apply_plan(session, event_id, plan, assigned_by=assigned_by)

    logger.info(
        "Event %d: workshop assignment %s (%d/%d teams fully assigned)",
        event_id,
        "previewed" if dry_run else f"executed, {persisted} rows written",
        plan.stats.fully_assigned,
        plan.stats.total_teams,
    )
    return AssignmentRunResult(event_id=event_id, dry_run=dry_run, persisted_count=persisted, plan=plan)


def clear_workshop_assignments(session: Session, event_id: int) -> int:
    """Delete all persisted assignments of the event without running the engine."""
    _require_event(session, event_id)

    with event_lock(event_id):
        return clear_assignments(session, event_id)
