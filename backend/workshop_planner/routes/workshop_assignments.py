"""
Workshop Assignment Endpoints

  POST   /events/{event_id}/workshop-assignments/run?dry_run=true   preview or execute
  DELETE /events/{event_id}/workshop-assignments                    clear (no engine run)
  GET    /events/{event_id}/workshop-assignments                    persisted rows
  GET    /events/{event_id}/workshop-assignments/stats              persisted statistics
  PUT    /events/{event_id}/workshop-assignments/manual             manual upsert of one label
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlmodel import Session

from workshop_planner.database import get_session
from workshop_planner.models.event import Event
from workshop_planner.services.assignment_orchestrator import (
    AssignmentRunResult,
    EventNotFound,
    clear_workshop_assignments,
    run_workshop_assignment,
)
from workshop_planner.services.assignment_types import AssignmentStats, AssignmentValidationError, SlotLabel
from workshop_planner.services.plan_applier import list_assignments, persisted_stats
from workshop_planner.utils.manual_assignment import ManualAssignmentValidationError, manual_assign

logger = logging.getLogger(__name__)

router = APIRouter()


class WorkshopAssignmentResponse(BaseModel):
    id: int
    event_id: int
    team_id: int
    workshop_id: int
    time_slot_id: int
    assignment_slot: str
    preference_matched: Optional[int]
    assignment_type: str
    assigned_by: Optional[str]
    assigned_at: datetime

    class Config:
        from_attributes = True


class ManualAssignmentRequest(BaseModel):
    team_id: int
    workshop_id: int
    time_slot_id: int
    assignment_slot: SlotLabel
    assigned_by: Optional[str] = None


class ClearAssignmentsResponse(BaseModel):
    event_id: int
    deleted_count: int


def _require_event(session: Session, event_id: int) -> Event:
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@router.post("/events/{event_id}/workshop-assignments/run", response_model=AssignmentRunResult)
def run_assignment_endpoint(
    event_id: int,
    dry_run: bool = Query(True, description="Preview only; nothing is written"),
    assigned_by: Optional[str] = Query(None),
    session: Session = Depends(get_session),
):
    """
    Compute the two-workshop plan for every registered team.

    dry_run=true returns the plan only. dry_run=false replaces all stored
    assignments of the event with the plan (same plan the preview showed).
    """
    try:
        return run_workshop_assignment(session, event_id, dry_run=dry_run, assigned_by=assigned_by)
    except EventNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AssignmentValidationError as e:
        raise HTTPException(status_code=422, detail=f"ASSIGNMENT_INPUT_INVALID: {e}")


@router.delete("/events/{event_id}/workshop-assignments", response_model=ClearAssignmentsResponse)
def clear_assignments_endpoint(event_id: int, session: Session = Depends(get_session)):
    """Delete every stored workshop assignment of the event"""
    try:
        deleted = clear_workshop_assignments(session, event_id)
    except EventNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ClearAssignmentsResponse(event_id=event_id, deleted_count=deleted)


@router.get("/events/{event_id}/workshop-assignments", response_model=List[WorkshopAssignmentResponse])
def get_assignments(event_id: int, session: Session = Depends(get_session)):
    _require_event(session, event_id)
    return list_assignments(session, event_id)


@router.get("/events/{event_id}/workshop-assignments/stats", response_model=AssignmentStats)
def get_assignment_stats(event_id: int, session: Session = Depends(get_session)):
    """Completion counts and preference histogram of what is stored now"""
    _require_event(session, event_id)
    return persisted_stats(session, event_id)


@router.put("/events/{event_id}/workshop-assignments/manual", response_model=WorkshopAssignmentResponse)
def manual_assignment_endpoint(
    event_id: int, data: ManualAssignmentRequest, session: Session = Depends(get_session)
):
    _require_event(session, event_id)
    try:
        return manual_assign(
            session,
            event_id,
            team_id=data.team_id,
            workshop_id=data.workshop_id,
            time_slot_id=data.time_slot_id,
            slot_label=data.assignment_slot,
            assigned_by=data.assigned_by,
        )
    except ManualAssignmentValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
