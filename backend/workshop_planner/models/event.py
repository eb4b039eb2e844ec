from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from workshop_planner.models.workshop import Workshop
    from workshop_planner.models.workshop_time_slot import WorkshopTimeSlot


class Event(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    # Mentors may submit workshop preferences only while this is open
    workshop_preferences_open: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    workshops: List["Workshop"] = Relationship(back_populates="event")
    time_slots: List["WorkshopTimeSlot"] = Relationship(back_populates="event")
