from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from workshop_planner.models.event import Event

# Stored category value meaning "open to every team"
OPEN_CATEGORY = "general"


class Workshop(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("event_id", "name", name="uq_event_workshop_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    name: str
    description: Optional[str] = None
    category: Optional[str] = Field(default=None)  # None or "general" = unrestricted
    max_capacity: int  # Participants per time slot (not cumulative across slots)
    location: Optional[str] = None

    # Relationships
    event: "Event" = Relationship(back_populates="workshops")
