"""Ranked workshop lists per team; teams without a list are unranked."""

from typing import Dict, List, Mapping, Optional, Sequence


class PreferenceResolver:
    def __init__(self, preferences: Mapping[int, Sequence[int]]):
        self._lists: Dict[int, List[int]] = {team_id: list(ids) for team_id, ids in preferences.items()}

    def is_ranked(self, team_id: int) -> bool:
        return bool(self._lists.get(team_id))

    def ranked_workshops(self, team_id: int) -> List[int]:
        """Workshop ids in rank order (rank 1 first); empty for unranked teams."""
        return list(self._lists.get(team_id, []))

    def rank_of(self, team_id: int, workshop_id: int) -> Optional[int]:
        ranked = self._lists.get(team_id, [])
        if workshop_id in ranked:
            return ranked.index(workshop_id) + 1
        return None
