from workshop_planner.models.event import Event
from workshop_planner.models.event_registration import EventRegistration, RegistrationStatus
from workshop_planner.models.team import Team
from workshop_planner.models.workshop import OPEN_CATEGORY, Workshop
from workshop_planner.models.workshop_assignment import (
    ASSIGNMENT_TYPE_ALGORITHM,
    ASSIGNMENT_TYPE_MANUAL,
    WorkshopAssignment,
)
from workshop_planner.models.workshop_preference import WorkshopPreference
from workshop_planner.models.workshop_time_slot import WorkshopTimeSlot

__all__ = [
    "Event",
    "EventRegistration",
    "RegistrationStatus",
    "Team",
    "Workshop",
    "OPEN_CATEGORY",
    "WorkshopTimeSlot",
    "WorkshopPreference",
    "WorkshopAssignment",
    "ASSIGNMENT_TYPE_ALGORITHM",
    "ASSIGNMENT_TYPE_MANUAL",
]
