"""
Workshop Preference Endpoints

  GET  /events/{event_id}/teams/{team_id}/workshop-preferences   ranked list
  POST /events/{event_id}/teams/{team_id}/workshop-preferences   one-shot submission (mentor)
  PUT  /events/{event_id}/teams/{team_id}/workshop-preferences   overwrite (admin)
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session

from workshop_planner.database import get_session
from workshop_planner.models.event import Event
from workshop_planner.services.preference_service import (
    PreferencesAlreadySubmitted,
    PreferencesClosed,
    PreferenceSubmissionError,
    get_preferences,
    replace_preferences,
    submit_preferences,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class WorkshopPreferenceResponse(BaseModel):
    workshop_id: int
    preference_order: int
    submitted_by: Optional[str]
    submitted_at: datetime

    class Config:
        from_attributes = True


class PreferenceSubmission(BaseModel):
    workshop_ids: List[int]
    submitted_by: Optional[str] = None


@router.get(
    "/events/{event_id}/teams/{team_id}/workshop-preferences", response_model=List[WorkshopPreferenceResponse]
)
def get_team_preferences(event_id: int, team_id: int, session: Session = Depends(get_session)):
    if not session.get(Event, event_id):
        raise HTTPException(status_code=404, detail="Event not found")
    return get_preferences(session, event_id, team_id)


@router.post(
    "/events/{event_id}/teams/{team_id}/workshop-preferences",
    response_model=List[WorkshopPreferenceResponse],
    status_code=201,
)
def submit_team_preferences(
    event_id: int, team_id: int, data: PreferenceSubmission, session: Session = Depends(get_session)
):
    """Submit the team's ranked list (once; rank 1 = first id)"""
    if not session.get(Event, event_id):
        raise HTTPException(status_code=404, detail="Event not found")
    try:
        return submit_preferences(session, event_id, team_id, data.workshop_ids, submitted_by=data.submitted_by)
    except PreferencesAlreadySubmitted as e:
        raise HTTPException(status_code=409, detail=f"PREFERENCES_ALREADY_SUBMITTED: {e}")
    except PreferencesClosed as e:
        raise HTTPException(status_code=409, detail=f"PREFERENCES_CLOSED: {e}")
    except PreferenceSubmissionError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put(
    "/events/{event_id}/teams/{team_id}/workshop-preferences", response_model=List[WorkshopPreferenceResponse]
)
def replace_team_preferences(
    event_id: int, team_id: int, data: PreferenceSubmission, session: Session = Depends(get_session)
):
    """Admin overwrite; an empty list removes the team's preferences"""
    if not session.get(Event, event_id):
        raise HTTPException(status_code=404, detail="Event not found")
    try:
        return replace_preferences(session, event_id, team_id, data.workshop_ids)
    except PreferenceSubmissionError as e:
        raise HTTPException(status_code=400, detail=str(e))
