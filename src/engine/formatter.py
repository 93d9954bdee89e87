"""
Text formatting for team names and scores.

The strings produced here are exactly what reconciliation compares, so a
formatter change shows up as update actions on the next render.
"""
from typing import Optional

from engine.models import MatchTeam, COMPLETED, ROUND_ROBIN


class TextFormatter:
    """Interface for formatters passed to the layout engines."""

    def format_score(self, team: Optional[MatchTeam], opponent_team: Optional[MatchTeam],
                     bracket_type: str, match_state: str) -> str:
        raise NotImplementedError

    def format_team_name(self, name: Optional[str]) -> str:
        raise NotImplementedError


class BaseTextFormatter(TextFormatter):
    """Default formatting policy.

    - Disqualified team: "DQ"
    - Known score: the score
    - Completed match without scores: "W" / "L"
    - Unresolved round robin cell: "?"
    - Anything else: "-"
    """

    def format_score(self, team, opponent_team, bracket_type, match_state):
        if team is None:
            return '?' if bracket_type == ROUND_ROBIN else '-'
        if team.is_disqualified:
            return 'DQ'
        if team.score is not None:
            score = team.score
            if isinstance(score, float) and score.is_integer():
                score = int(score)
            return str(score)
        if match_state == COMPLETED:
            if team.is_winner or (opponent_team is not None and opponent_team.is_disqualified):
                return 'W'
            if opponent_team is not None and opponent_team.is_winner:
                return 'L'
        if bracket_type == ROUND_ROBIN:
            return '?'
        return '-'

    def format_team_name(self, name):
        return '-' if name is None else name


def format_team(formatter: TextFormatter, team: Optional[MatchTeam], opponent_team: Optional[MatchTeam],
                bracket_type: str, match_state: str) -> dict:
    """Display view of one team slot: formatted text plus the raw values animators need."""
    return {
        'id': team.id if team is not None else None,
        'name': formatter.format_team_name(team.name if team is not None else None),
        'score': formatter.format_score(team, opponent_team, bracket_type, match_state),
        'score_value': team.score if team is not None else None,
        'is_disqualified': team.is_disqualified if team is not None else False,
        'is_winner': team.is_winner if team is not None else False,
    }
