"""
Workshop preference lists: one ranked list per (event, team).

- submit_preferences: one-shot submission by a team mentor; only while the
  event has preferences open and only if nothing was submitted yet
- replace_preferences: admin overwrite (delete + insert); an empty list
  clears the team's preferences and makes it unranked
- get_preferences: ranked workshop ids for a team
"""

import logging
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from workshop_planner.models.event import Event
from workshop_planner.models.event_registration import EventRegistration, RegistrationStatus
from workshop_planner.models.team import Team
from workshop_planner.models.workshop import Workshop
from workshop_planner.models.workshop_preference import WorkshopPreference
from workshop_planner.services.assignment_types import MAX_PREFERENCES

logger = logging.getLogger(__name__)


class PreferenceSubmissionError(Exception):
    """Preference list rejected"""

    pass


class PreferencesAlreadySubmitted(PreferenceSubmissionError):
    pass


class PreferencesClosed(PreferenceSubmissionError):
    pass


def _require_registered_team(session: Session, event_id: int, team_id: int) -> Team:
    team = session.get(Team, team_id)
    if not team:
        raise PreferenceSubmissionError(f"Team {team_id} not found")

    registration = session.exec(
        select(EventRegistration).where(
            EventRegistration.event_id == event_id,
            EventRegistration.team_id == team_id,
            EventRegistration.registration_status != RegistrationStatus.cancelled.value,
        )
    ).first()
    if not registration:
        raise PreferenceSubmissionError(f"Team {team_id} is not registered to event {event_id}")
    return team


def validate_preference_list(
    session: Session, event_id: int, workshop_ids: Sequence[int], allow_empty: bool = False
) -> None:
    if not workshop_ids and not allow_empty:
        raise PreferenceSubmissionError("At least one workshop must be ranked")

    if len(workshop_ids) > MAX_PREFERENCES:
        raise PreferenceSubmissionError(f"At most {MAX_PREFERENCES} workshops can be ranked")

    if len(workshop_ids) != len(set(workshop_ids)):
        raise PreferenceSubmissionError("A workshop can only be ranked once")

    if workshop_ids:
        event_workshop_ids = set(session.exec(select(Workshop.id).where(Workshop.event_id == event_id)).all())
        unknown = [w for w in workshop_ids if w not in event_workshop_ids]
        if unknown:
            raise PreferenceSubmissionError(f"Workshops {unknown} do not belong to event {event_id}")


def get_preferences(session: Session, event_id: int, team_id: int) -> List[WorkshopPreference]:
    return session.exec(
        select(WorkshopPreference)
        .where(WorkshopPreference.event_id == event_id, WorkshopPreference.team_id == team_id)
        .order_by(WorkshopPreference.preference_order)
    ).all()


def _insert_list(
    session: Session, event_id: int, team_id: int, workshop_ids: Sequence[int], submitted_by: Optional[str]
) -> None:
    for index, workshop_id in enumerate(workshop_ids, start=1):
        session.add(
            WorkshopPreference(
                event_id=event_id,
                team_id=team_id,
                workshop_id=workshop_id,
                preference_order=index,
                submitted_by=submitted_by,
            )
        )


def submit_preferences(
    session: Session, event_id: int, team_id: int, workshop_ids: Sequence[int], submitted_by: Optional[str] = None
) -> List[WorkshopPreference]:
    """
    First (and only) submission of a team's ranked list.

    Raises:
        PreferencesClosed: event is not accepting preferences
        PreferencesAlreadySubmitted: team already has a list
        PreferenceSubmissionError: invalid team or list
    """
    event = session.get(Event, event_id)
    if not event:
        raise PreferenceSubmissionError(f"Event {event_id} not found")
    if not event.workshop_preferences_open:
        raise PreferencesClosed(f"Event {event_id} is not accepting workshop preferences")

    _require_registered_team(session, event_id, team_id)

    if get_preferences(session, event_id, team_id):
        raise PreferencesAlreadySubmitted(f"Preferences were already submitted for team {team_id}")

    validate_preference_list(session, event_id, workshop_ids)

    try:
        _insert_list(session, event_id, team_id, workshop_ids, submitted_by)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise

    logger.info("Event %d: team %d submitted %d workshop preferences", event_id, team_id, len(workshop_ids))
    return get_preferences(session, event_id, team_id)


def replace_preferences(
    session: Session, event_id: int, team_id: int, workshop_ids: Sequence[int]
) -> List[WorkshopPreference]:
    """Admin overwrite of a team's list; keeps the original submitter."""
    if not session.get(Event, event_id):
        raise PreferenceSubmissionError(f"Event {event_id} not found")

    _require_registered_team(session, event_id, team_id)
    validate_preference_list(session, event_id, workshop_ids, allow_empty=True)

    existing = get_preferences(session, event_id, team_id)
    submitted_by = existing[0].submitted_by if existing else None

    try:
        for pref in existing:
            session.delete(pref)
        session.flush()
        _insert_list(session, event_id, team_id, workshop_ids, submitted_by)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise

    logger.info("Event %d: team %d preferences replaced (%d ranked)", event_id, team_id, len(workshop_ids))
    return get_preferences(session, event_id, team_id)
