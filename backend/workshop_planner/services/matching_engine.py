"""
Workshop Matching Engine: deterministic two-label greedy assignment

Every team should leave with two workshops (labels A and B) in two different
time slots. Processing order:

1. Validate all inputs (any problem raises before a single seat is taken)
2. Ranked teams first, then unranked teams, roster order within each group
3. Per team, label A then label B:
   a. Ranked walk: preference rank order, then ascending slot_number
   b. Fallback: workshop input order, then ascending slot_number
4. A team whose label A fails is not tried for B

Placements are committed immediately; there is no backtracking across teams,
so earlier roster entries win contested seats.

Non-goals:
- Global optimality (no deferred acceptance / bipartite matching)
- Any randomness
- Persistence (see plan_applier)
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

from workshop_planner.services.assignment_stats import summarize
from workshop_planner.services.assignment_types import (
    CATEGORY_MISMATCH_ONLY,
    MAX_PREFERENCES,
    NO_PREFERRED_CAPACITY,
    PREFERENCE_FALLBACK,
    SEVERITY_ERROR,
    SEVERITY_WARNING,
    UNRANKED_NO_CAPACITY,
    AssignmentIssue,
    AssignmentPlan,
    AssignmentValidationError,
    PlannedAssignment,
    SlotLabel,
    TeamAssignmentResult,
    TeamInput,
    TimeSlotInput,
    WorkshopInput,
)
from workshop_planner.services.capacity_tracker import CapacityTracker
from workshop_planner.services.eligibility import category_allowed, is_eligible
from workshop_planner.services.preference_resolver import PreferenceResolver

logger = logging.getLogger(__name__)

LABEL_ORDER = (SlotLabel.A, SlotLabel.B)


def get_time_slot_sort_key(slot: TimeSlotInput) -> Tuple:
    """Order: slot_number → time_slot_id"""
    return (slot.slot_number, slot.time_slot_id)


def validate_inputs(
    teams: Sequence[TeamInput],
    workshops: Sequence[WorkshopInput],
    time_slots: Sequence[TimeSlotInput],
    preferences: Mapping[int, Sequence[int]],
) -> None:
    """
    Perform sanity checks before assignment.

    Raises AssignmentValidationError if validation fails.
    """
    if not workshops:
        raise AssignmentValidationError("Workshop list is empty")

    if not time_slots:
        raise AssignmentValidationError("Time slot list is empty")

    team_ids = [t.team_id for t in teams]
    if len(team_ids) != len(set(team_ids)):
        raise AssignmentValidationError("Duplicate team IDs detected")

    workshop_ids = [w.workshop_id for w in workshops]
    if len(workshop_ids) != len(set(workshop_ids)):
        raise AssignmentValidationError("Duplicate workshop IDs detected")

    slot_ids = [s.time_slot_id for s in time_slots]
    if len(slot_ids) != len(set(slot_ids)):
        raise AssignmentValidationError("Duplicate time slot IDs detected")

    slot_numbers = [s.slot_number for s in time_slots]
    if len(slot_numbers) != len(set(slot_numbers)):
        raise AssignmentValidationError("Duplicate time slot numbers detected")

    for team in teams:
        if team.participant_count is None or team.participant_count < 1:
            raise AssignmentValidationError(
                f"Team {team.team_id} ({team.name}) has invalid participant count: {team.participant_count}"
            )

    for workshop in workshops:
        if workshop.max_capacity is None or workshop.max_capacity < 1:
            raise AssignmentValidationError(
                f"Workshop {workshop.workshop_id} ({workshop.name}) has invalid max capacity: {workshop.max_capacity}"
            )

    known_teams = set(team_ids)
    known_workshops = set(workshop_ids)
    for team_id, ranked in preferences.items():
        if team_id not in known_teams:
            raise AssignmentValidationError(f"Preferences submitted for unknown team {team_id}")
        if len(ranked) == 0:
            raise AssignmentValidationError(f"Team {team_id} has an empty preference list")
        if len(ranked) > MAX_PREFERENCES:
            raise AssignmentValidationError(
                f"Team {team_id} ranked {len(ranked)} workshops, maximum is {MAX_PREFERENCES}"
            )
        if len(ranked) != len(set(ranked)):
            raise AssignmentValidationError(f"Team {team_id} ranked the same workshop more than once")
        for workshop_id in ranked:
            if workshop_id not in known_workshops:
                raise AssignmentValidationError(
                    f"Team {team_id} preference references unknown workshop {workshop_id}"
                )


class _LabelPlacer:
    """Places one team's labels against the shared tracker for a single run."""

    def __init__(
        self,
        workshops: List[WorkshopInput],
        time_slots: List[TimeSlotInput],
        resolver: PreferenceResolver,
        tracker: CapacityTracker,
    ):
        self.workshops = workshops
        self.workshops_by_id: Dict[int, WorkshopInput] = {w.workshop_id: w for w in workshops}
        self.time_slots = time_slots
        self.resolver = resolver
        self.tracker = tracker

    def _try_pair(
        self,
        team: TeamInput,
        workshop: WorkshopInput,
        slot: TimeSlotInput,
        used_workshop_ids: Set[int],
        used_time_slot_ids: Set[int],
    ) -> bool:
        eligible, _ = is_eligible(team, workshop, slot, used_workshop_ids, used_time_slot_ids)
        if not eligible:
            return False
        return self.tracker.reserve(workshop.workshop_id, slot.time_slot_id, team.participant_count)

    def _planned(
        self, team: TeamInput, label: SlotLabel, workshop: WorkshopInput, slot: TimeSlotInput, rank: Optional[int]
    ) -> PlannedAssignment:
        return PlannedAssignment(
            team_id=team.team_id,
            slot_label=label,
            workshop_id=workshop.workshop_id,
            workshop_name=workshop.name,
            time_slot_id=slot.time_slot_id,
            slot_number=slot.slot_number,
            preference_matched=rank,
        )

    def place_ranked(
        self, team: TeamInput, label: SlotLabel, used_workshop_ids: Set[int], used_time_slot_ids: Set[int]
    ) -> Optional[PlannedAssignment]:
        for rank, workshop_id in enumerate(self.resolver.ranked_workshops(team.team_id), start=1):
            workshop = self.workshops_by_id[workshop_id]
            for slot in self.time_slots:
                if self._try_pair(team, workshop, slot, used_workshop_ids, used_time_slot_ids):
                    return self._planned(team, label, workshop, slot, rank)
        return None

    def place_fallback(
        self, team: TeamInput, label: SlotLabel, used_workshop_ids: Set[int], used_time_slot_ids: Set[int]
    ) -> Optional[PlannedAssignment]:
        for workshop in self.workshops:
            for slot in self.time_slots:
                if self._try_pair(team, workshop, slot, used_workshop_ids, used_time_slot_ids):
                    return self._planned(team, label, workshop, slot, None)
        return None

    def failure_issue(self, team: TeamInput, label: SlotLabel, ranked: bool) -> AssignmentIssue:
        which = "first" if label == SlotLabel.A else "second"
        if not any(category_allowed(team, w) for w in self.workshops):
            code = CATEGORY_MISMATCH_ONLY
            message = (
                f"No workshop accepts category '{team.category}' for slot {label.value}; "
                f"every workshop is restricted to another category"
            )
        elif ranked:
            code = NO_PREFERRED_CAPACITY
            message = (
                f"No capacity available for {which} slot ({label.value}): "
                f"preferred workshops and fallback workshops are all full or already used"
            )
        else:
            code = UNRANKED_NO_CAPACITY
            message = f"No capacity available for {which} slot ({label.value}) and team has no preferences"
        return AssignmentIssue(
            team_id=team.team_id, slot_label=label, code=code, severity=SEVERITY_ERROR, message=message
        )

    def assign_team(self, team: TeamInput) -> TeamAssignmentResult:
        ranked = self.resolver.is_ranked(team.team_id)
        used_workshop_ids: Set[int] = set()
        used_time_slot_ids: Set[int] = set()
        placed: Dict[SlotLabel, PlannedAssignment] = {}
        issues: List[AssignmentIssue] = []

        for label in LABEL_ORDER:
            planned = None
            if ranked:
                planned = self.place_ranked(team, label, used_workshop_ids, used_time_slot_ids)
            if planned is None:
                planned = self.place_fallback(team, label, used_workshop_ids, used_time_slot_ids)
                if planned is not None and ranked:
                    issues.append(
                        AssignmentIssue(
                            team_id=team.team_id,
                            slot_label=label,
                            code=PREFERENCE_FALLBACK,
                            severity=SEVERITY_WARNING,
                            message=(
                                f"No preferred workshop available for slot {label.value}; "
                                f"placed in '{planned.workshop_name}' (slot {planned.slot_number}) by fallback"
                            ),
                        )
                    )

            if planned is None:
                issue = self.failure_issue(team, label, ranked)
                issues.append(issue)
                logger.debug("Team %d (%s): slot %s unplaced [%s]", team.team_id, team.name, label.value, issue.code)
                # Label B is never attempted without label A
                break

            placed[label] = planned
            used_workshop_ids.add(planned.workshop_id)
            used_time_slot_ids.add(planned.time_slot_id)

        return TeamAssignmentResult(
            team_id=team.team_id,
            team_name=team.name,
            participant_count=team.participant_count,
            ranked=ranked,
            workshop_a=placed.get(SlotLabel.A),
            workshop_b=placed.get(SlotLabel.B),
            errors=issues,
        )


def run_assignment(
    teams: Sequence[TeamInput],
    workshops: Sequence[WorkshopInput],
    time_slots: Sequence[TimeSlotInput],
    preferences: Mapping[int, Sequence[int]],
) -> AssignmentPlan:
    """
    Compute a full workshop assignment plan.

    Pure function: no I/O, no persistence, identical inputs give an identical
    plan. Used unchanged for dry runs and for the pre-commit step of execute.

    Raises:
        AssignmentValidationError: malformed inputs (nothing is placed)
    """
    teams = list(teams)
    workshops = list(workshops)
    ordered_slots = sorted(time_slots, key=get_time_slot_sort_key)

    validate_inputs(teams, workshops, ordered_slots, preferences)

    resolver = PreferenceResolver(preferences)
    tracker = CapacityTracker(workshops, ordered_slots)
    placer = _LabelPlacer(workshops, ordered_slots, resolver, tracker)

    ranked_teams = [t for t in teams if resolver.is_ranked(t.team_id)]
    unranked_teams = [t for t in teams if not resolver.is_ranked(t.team_id)]

    results_by_team: Dict[int, TeamAssignmentResult] = {}
    for team in ranked_teams + unranked_teams:
        results_by_team[team.team_id] = placer.assign_team(team)

    results = [results_by_team[t.team_id] for t in teams]
    assignments = [
        planned for r in results for planned in (r.workshop_a, r.workshop_b) if planned is not None
    ]
    stats = summarize(results)

    logger.info(
        "Workshop assignment: teams=%d ranked=%d unranked=%d full=%d partial=%d unassigned=%d",
        stats.total_teams,
        len(ranked_teams),
        len(unranked_teams),
        stats.fully_assigned,
        stats.partially_assigned,
        stats.unassigned,
    )

    return AssignmentPlan(results=results, assignments=assignments, stats=stats)
