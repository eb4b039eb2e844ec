from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import String
from sqlmodel import Column, Field, SQLModel


class RegistrationStatus(str, Enum):
    confirmed = "confirmed"
    cancelled = "cancelled"
    checked_in = "checked_in"


class EventRegistration(SQLModel, table=True):
    """One person's registration to an event, optionally linked to a team.

    Team headcount for workshop assignment is the sum of participant_count
    over the team's non-cancelled registrations.
    """

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    team_id: Optional[int] = Field(default=None, foreign_key="team.id", index=True)
    user_id: Optional[str] = None
    participant_count: int = Field(default=1)
    registration_status: RegistrationStatus = Field(
        default=RegistrationStatus.confirmed, sa_column=Column(String, nullable=False)
    )
    created_at: datetime = Field(default_factory=datetime.utcnow)
