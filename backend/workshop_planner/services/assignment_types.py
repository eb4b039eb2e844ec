"""
Workshop Assignment: engine input/output types.

Inputs are plain frozen dataclasses so the engine never sees an ORM row.
Outputs are pydantic models so a plan can be returned directly as an HTTP
response and compared byte-for-byte (model_dump_json) across runs.
"""

from dataclasses import dataclass
from datetime import time
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

# A preference list holds at most this many ranked workshops
MAX_PREFERENCES = 7


class SlotLabel(str, Enum):
    A = "A"
    B = "B"


class AssignmentError(Exception):
    """Base exception for workshop assignment errors"""

    pass


class AssignmentValidationError(AssignmentError):
    """Inputs rejected before any placement"""

    pass


# ============================================================================
# Issue codes (per-team, never raised)
# ============================================================================

NO_PREFERRED_CAPACITY = "NO_PREFERRED_CAPACITY"
CATEGORY_MISMATCH_ONLY = "CATEGORY_MISMATCH_ONLY"
UNRANKED_NO_CAPACITY = "UNRANKED_NO_CAPACITY"
PREFERENCE_FALLBACK = "PREFERENCE_FALLBACK"

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"


# ============================================================================
# Engine inputs
# ============================================================================


@dataclass(frozen=True)
class TeamInput:
    team_id: int
    name: str
    participant_count: int
    category: Optional[str] = None


@dataclass(frozen=True)
class WorkshopInput:
    workshop_id: int
    name: str
    max_capacity: int
    category: Optional[str] = None  # None = open to every team


@dataclass(frozen=True)
class TimeSlotInput:
    time_slot_id: int
    slot_number: int
    start_time: Optional[time] = None
    end_time: Optional[time] = None


# ============================================================================
# Engine outputs
# ============================================================================


class PlannedAssignment(BaseModel):
    team_id: int
    slot_label: SlotLabel
    workshop_id: int
    workshop_name: str
    time_slot_id: int
    slot_number: int
    preference_matched: Optional[int] = None


class AssignmentIssue(BaseModel):
    team_id: int
    slot_label: SlotLabel
    code: str
    severity: str
    message: str


class TeamAssignmentResult(BaseModel):
    team_id: int
    team_name: str
    participant_count: int
    ranked: bool
    workshop_a: Optional[PlannedAssignment] = None
    workshop_b: Optional[PlannedAssignment] = None
    errors: List[AssignmentIssue] = []

    @property
    def assigned_count(self) -> int:
        return (self.workshop_a is not None) + (self.workshop_b is not None)


class PreferenceBucket(BaseModel):
    preference: int
    count: int


class AssignmentStats(BaseModel):
    total_teams: int
    fully_assigned: int
    partially_assigned: int
    unassigned: int
    preference_stats: List[PreferenceBucket]


class AssignmentPlan(BaseModel):
    results: List[TeamAssignmentResult]
    assignments: List[PlannedAssignment]
    stats: AssignmentStats
