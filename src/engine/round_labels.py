"""
Round naming for elimination trees.

Names are inferred from how many matches each round holds. This is a
best-effort classifier: shapes that do not look like a standard bracket
(irregular seed counts, unusual third place placement) fall back to
numbered "Round N" labels rather than raising.
"""
from typing import Dict, List

from engine.hierarchy import HierarchyNode
from engine.models import SINGLE_ELIMINATION

NAN = float('nan')


def count_matches_per_round(root: HierarchyNode) -> Dict[int, int]:
    """Histogram of round number -> match count over the tree's match nodes.

    A match without a round number is counted under its node height.
    """
    counts: Dict[int, int] = {}

    def _count(node):
        if node.is_root:
            return
        round_number = node.match.round_number if node.match.round_number is not None else node.height
        counts[round_number] = counts.get(round_number, 0) + 1

    root.each_before(_count)
    return counts


def get_round_names(match_counts: Dict[int, int], is_losers_bracket: bool,
                    bracket_type: str, has_third_place_match: bool = False) -> List[str]:
    """
    Label each round of one bracket side, earliest round first.

    Comparisons against a missing round are always false, so an absent
    round never earns a name.
    """
    if not match_counts:
        return []

    round_names: List[str] = []
    round_count = len(match_counts)
    max_round = max(match_counts)

    def count(round_number, default=NAN):
        return match_counts.get(round_number, default)

    if is_losers_bracket:
        if round_count >= 2 and count(max_round) == 1:
            round_names.append('Semi-Finals')
            if count(max_round - 1) == 1:
                round_names.append('Finals')

        if (count(max_round - len(round_names)) <= 2
                and count(max_round - len(round_names) - 1, 0) <= 2):
            round_names.insert(0, 'Quarter-Finals')
    else:
        final_match_count = 2 if bracket_type == SINGLE_ELIMINATION and has_third_place_match else 1
        if (round_count >= 3
                and count(max_round) == 1
                and count(max_round - 1) == 1
                and count(max_round - 2) == 1):
            round_names.extend(['Finals', 'Grand Finals', 'Bracket Reset'])
        elif (round_count >= 2
                and count(max_round) == 1
                and count(max_round - 1) == 1):
            round_names.extend(['Finals', 'Grand Finals'])
        elif count(max_round) == final_match_count:
            round_names.append('Finals')

        if count(max_round - len(round_names)) <= 2:
            round_names.insert(0, 'Semi-Finals')

        if count(max_round - len(round_names)) <= 4:
            round_names.insert(0, 'Quarter-Finals')

    remaining = round_count - len(round_names)
    if remaining > 0:
        round_names[0:0] = [f'Round {i + 1}' for i in range(remaining)]

    return round_names
