"""
Tests for assignment statistics.
"""

from workshop_planner.services.assignment_stats import summarize, summarize_labels
from workshop_planner.services.assignment_types import (
    MAX_PREFERENCES,
    PlannedAssignment,
    SlotLabel,
    TeamAssignmentResult,
)


def _planned(team_id, label, workshop_id, rank):
    return PlannedAssignment(
        team_id=team_id,
        slot_label=label,
        workshop_id=workshop_id,
        workshop_name=f"W{workshop_id}",
        time_slot_id=workshop_id * 10,
        slot_number=1 if label == SlotLabel.A else 2,
        preference_matched=rank,
    )


def test_summarize_counts_and_histogram():
    results = [
        TeamAssignmentResult(
            team_id=1,
            team_name="Full",
            participant_count=2,
            ranked=True,
            workshop_a=_planned(1, SlotLabel.A, 1, 1),
            workshop_b=_planned(1, SlotLabel.B, 2, 3),
        ),
        TeamAssignmentResult(
            team_id=2,
            team_name="Partial",
            participant_count=1,
            ranked=True,
            workshop_a=_planned(2, SlotLabel.A, 1, 1),
        ),
        TeamAssignmentResult(
            team_id=3,
            team_name="Fallback",
            participant_count=1,
            ranked=False,
            workshop_a=_planned(3, SlotLabel.A, 3, None),
            workshop_b=_planned(3, SlotLabel.B, 1, None),
        ),
        TeamAssignmentResult(team_id=4, team_name="None", participant_count=4, ranked=False),
    ]

    stats = summarize(results)

    assert stats.total_teams == 4
    assert stats.fully_assigned == 2
    assert stats.partially_assigned == 1
    assert stats.unassigned == 1
    hist = {b.preference: b.count for b in stats.preference_stats}
    assert list(hist) == list(range(1, MAX_PREFERENCES + 1))
    assert hist[1] == 2
    assert hist[3] == 1
    assert sum(hist.values()) == 3


def test_summarize_empty_roster():
    stats = summarize([])
    assert stats.total_teams == 0
    assert stats.fully_assigned == stats.partially_assigned == stats.unassigned == 0
    assert all(b.count == 0 for b in stats.preference_stats)


def test_summarize_labels_ignores_teams_outside_roster():
    stats = summarize_labels([1, 2], [(1, "A", 2), (1, "B", None), (9, "A", 1)])
    assert stats.total_teams == 2
    assert stats.fully_assigned == 1
    assert stats.unassigned == 1
    hist = {b.preference: b.count for b in stats.preference_stats}
    assert hist[1] == 0
    assert hist[2] == 1
