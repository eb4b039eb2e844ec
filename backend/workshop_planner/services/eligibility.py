"""
Eligibility Filter: may a team be placed in a (workshop, time slot)?

Rules:
1. Category: a workshop with a category only accepts teams of that exact
   category (categories are opaque labels, compared by equality)
2. A team never gets the same workshop twice
3. A team never gets two workshops in the same time slot

Capacity is NOT checked here; that is the CapacityTracker's job.
"""

from typing import Collection, Optional, Tuple

from workshop_planner.services.assignment_types import TeamInput, TimeSlotInput, WorkshopInput

CATEGORY_EXCLUDED = "CATEGORY_EXCLUDED"
WORKSHOP_ALREADY_USED = "WORKSHOP_ALREADY_USED"
TIME_SLOT_ALREADY_USED = "TIME_SLOT_ALREADY_USED"


def category_allowed(team: TeamInput, workshop: WorkshopInput) -> bool:
    if workshop.category is None:
        return True
    return team.category == workshop.category


def is_eligible(
    team: TeamInput,
    workshop: WorkshopInput,
    time_slot: TimeSlotInput,
    used_workshop_ids: Collection[int],
    used_time_slot_ids: Collection[int],
) -> Tuple[bool, Optional[str]]:
    """
    Check whether team may take this (workshop, time slot) pair.

    Returns: (is_eligible, reason_if_not)
    """
    if not category_allowed(team, workshop):
        return False, CATEGORY_EXCLUDED

    if workshop.workshop_id in used_workshop_ids:
        return False, WORKSHOP_ALREADY_USED

    if time_slot.time_slot_id in used_time_slot_ids:
        return False, TIME_SLOT_ALREADY_USED

    return True, None
