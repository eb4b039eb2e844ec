from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from workshop_planner.models.team import Team
    from workshop_planner.models.workshop import Workshop
    from workshop_planner.models.workshop_time_slot import WorkshopTimeSlot

ASSIGNMENT_TYPE_ALGORITHM = "algorithm"
ASSIGNMENT_TYPE_MANUAL = "manual"


class WorkshopAssignment(SQLModel, table=True):
    __table_args__ = (
        SAUniqueConstraint("event_id", "team_id", "assignment_slot", name="uq_assignment_event_team_slot"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    team_id: int = Field(foreign_key="team.id")
    workshop_id: int = Field(foreign_key="workshop.id")
    time_slot_id: int = Field(foreign_key="workshoptimeslot.id")
    assignment_slot: str = Field(sa_column=Column(String(1), nullable=False))  # "A" or "B"
    preference_matched: Optional[int] = None
    assignment_type: str = Field(default=ASSIGNMENT_TYPE_ALGORITHM)
    assigned_by: Optional[str] = None
    assigned_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    team: "Team" = Relationship()
    workshop: "Workshop" = Relationship()
    time_slot: "WorkshopTimeSlot" = Relationship()
