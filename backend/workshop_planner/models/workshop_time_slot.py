from datetime import time
from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from workshop_planner.models.event import Event


class WorkshopTimeSlot(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("event_id", "slot_number", name="uq_event_slot_number"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    slot_number: int  # 1-based ordinal; all workshops run once per slot
    start_time: Optional[time] = None
    end_time: Optional[time] = None

    # Relationships
    event: "Event" = Relationship(back_populates="time_slots")
