from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel


class WorkshopPreference(SQLModel, table=True):
    __table_args__ = (
        SAUniqueConstraint("event_id", "team_id", "workshop_id", name="uq_preference_team_workshop"),
        SAUniqueConstraint("event_id", "team_id", "preference_order", name="uq_preference_team_order"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    team_id: int = Field(foreign_key="team.id", index=True)
    workshop_id: int = Field(foreign_key="workshop.id")
    preference_order: int  # 1 = most preferred
    submitted_by: Optional[str] = None
    submitted_at: datetime = Field(default_factory=datetime.utcnow)
