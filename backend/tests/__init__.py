# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from workshop_planner.models.event import Event  # noqa: F401
from workshop_planner.models.event_registration import EventRegistration  # noqa: F401
from workshop_planner.models.team import Team  # noqa: F401
from workshop_planner.models.workshop import Workshop  # noqa: F401
from workshop_planner.models.workshop_assignment import WorkshopAssignment  # noqa: F401
from workshop_planner.models.workshop_preference import WorkshopPreference  # noqa: F401
from workshop_planner.models.workshop_time_slot import WorkshopTimeSlot  # noqa: F401
