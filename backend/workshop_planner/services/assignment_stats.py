"""
Statistics for a workshop assignment plan (or for persisted assignments).

Counts teams by completion level and builds a histogram of matched
preference ranks. Fallback placements (no matched rank) are forced,
non-preferential placements and are left out of the histogram.
"""

from collections import defaultdict
from typing import Dict, Iterable, Optional, Sequence, Set, Tuple

from workshop_planner.services.assignment_types import (
    MAX_PREFERENCES,
    AssignmentStats,
    PreferenceBucket,
    TeamAssignmentResult,
)

# (team_id, slot_label, preference_matched)
LabelEntry = Tuple[int, str, Optional[int]]


def summarize_labels(team_ids: Sequence[int], entries: Iterable[LabelEntry]) -> AssignmentStats:
    """
    Summarize committed labels for a roster.

    Entries for teams outside team_ids are ignored so the counts always add
    up to the roster size.
    """
    roster: Set[int] = set(team_ids)
    labels_by_team: Dict[int, Set[str]] = defaultdict(set)
    pref_counts: Dict[int, int] = {rank: 0 for rank in range(1, MAX_PREFERENCES + 1)}

    for team_id, label, rank in entries:
        if team_id not in roster:
            continue
        labels_by_team[team_id].add(str(label))
        if rank is not None:
            pref_counts[rank] = pref_counts.get(rank, 0) + 1

    fully = sum(1 for t in roster if len(labels_by_team.get(t, ())) >= 2)
    partially = sum(1 for t in roster if len(labels_by_team.get(t, ())) == 1)
    unassigned = len(roster) - fully - partially

    return AssignmentStats(
        total_teams=len(roster),
        fully_assigned=fully,
        partially_assigned=partially,
        unassigned=unassigned,
        preference_stats=[PreferenceBucket(preference=rank, count=pref_counts[rank]) for rank in sorted(pref_counts)],
    )


def summarize(results: Sequence[TeamAssignmentResult]) -> AssignmentStats:
    entries = []
    for result in results:
        for planned in (result.workshop_a, result.workshop_b):
            if planned is not None:
                entries.append((result.team_id, planned.slot_label.value, planned.preference_matched))
    return summarize_labels([r.team_id for r in results], entries)
