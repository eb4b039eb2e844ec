"""
Remaining seat capacity per (workshop, time slot) during one assignment run.

Every workshop runs once in every time slot with the same max_capacity, so
the tracker starts each pair at the workshop's capacity and counts down in
participants (not teams). One tracker belongs to exactly one engine
invocation; it is mutated sequentially and never shared.
"""

from typing import Dict, Iterable, Tuple

from workshop_planner.services.assignment_types import TimeSlotInput, WorkshopInput


class CapacityTracker:
    def __init__(self, workshops: Iterable[WorkshopInput], time_slots: Iterable[TimeSlotInput]):
        slots = list(time_slots)
        self._capacity: Dict[int, int] = {}
        self._used: Dict[Tuple[int, int], int] = {}
        for workshop in workshops:
            self._capacity[workshop.workshop_id] = workshop.max_capacity
            for slot in slots:
                self._used[(workshop.workshop_id, slot.time_slot_id)] = 0

    def _key(self, workshop_id: int, time_slot_id: int) -> Tuple[int, int]:
        key = (workshop_id, time_slot_id)
        if key not in self._used:
            raise KeyError(f"Unknown workshop/time slot pair: workshop {workshop_id}, time slot {time_slot_id}")
        return key

    def remaining(self, workshop_id: int, time_slot_id: int) -> int:
        key = self._key(workshop_id, time_slot_id)
        return self._capacity[workshop_id] - self._used[key]

    def used(self, workshop_id: int, time_slot_id: int) -> int:
        return self._used[self._key(workshop_id, time_slot_id)]

    def reserve(self, workshop_id: int, time_slot_id: int, headcount: int) -> bool:
        """
        Consume headcount seats if they fit.

        Returns False and leaves the tracker unchanged when remaining < headcount.
        """
        key = self._key(workshop_id, time_slot_id)
        if self._capacity[workshop_id] - self._used[key] < headcount:
            return False
        self._used[key] += headcount
        return True

    def release(self, workshop_id: int, time_slot_id: int, headcount: int) -> None:
        """Give back seats taken by a prior reserve()."""
        key = self._key(workshop_id, time_slot_id)
        if headcount > self._used[key]:
            raise ValueError(
                f"Cannot release {headcount} seats from workshop {workshop_id} / time slot {time_slot_id}: "
                f"only {self._used[key]} reserved"
            )
        self._used[key] -= headcount
