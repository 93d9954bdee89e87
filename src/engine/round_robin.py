"""
Round robin results grid.

For N participating teams the grid has (N+1) x (N+1) cells: a blank
corner, team name headers along the top row and the left column, a
"no match" diagonal, and one match cell for every ordered pair of teams.
"""
from typing import List, Optional

from engine.config import section
from engine.errors import MatchGroupCountError, MalformedBracketError
from engine.formatter import BaseTextFormatter, TextFormatter, format_team
from engine.models import Bracket, Match, MatchTeam, ROUND_ROBIN, IN_PROGRESS, COMPLETED, UNKNOWN


def get_unique_teams(matches: List[Match]) -> List[MatchTeam]:
    """Teams in order of first appearance (bottom slot before top slot).

    Byes and unresolved slots (no id or no name) are skipped.
    """
    teams = []
    seen = set()
    for match in matches:
        for team in (match.bottom_team, match.top_team):
            if team.id is None or team.name is None:
                continue
            if team.id in seen:
                continue
            seen.add(team.id)
            teams.append(team)
    return teams


def find_match_between(matches: List[Match], team_a: MatchTeam, team_b: MatchTeam) -> Optional[Match]:
    """First match with both teams in either slot."""
    for match in matches:
        ids = (match.top_team.id, match.bottom_team.id)
        if team_a.id in ids and team_b.id in ids:
            return match
    return None


def _cell_status(match: Optional[Match], left_team: Optional[MatchTeam], top_team: Optional[MatchTeam]) -> dict:
    if match is None or match.state not in (IN_PROGRESS, COMPLETED):
        return {'in_progress': False, 'winner': None}
    if match.state == IN_PROGRESS:
        return {'in_progress': True, 'winner': None}
    if left_team.score is None or top_team.score is None:
        return {'in_progress': False, 'winner': None}
    return {'in_progress': False, 'winner': 'left' if left_team.score > top_team.score else 'top'}


def build_round_robin_grid(bracket: Bracket, settings: Optional[dict] = None,
                           formatter: Optional[TextFormatter] = None) -> dict:
    """
    Build the pairing grid for a round robin group.

    Cells are listed row by row. Match cells are oriented so the left
    score always belongs to the row's team, whichever slot the data source
    recorded it in.
    """
    if bracket.type != ROUND_ROBIN:
        raise MalformedBracketError(f"Cannot lay out a {bracket.type} bracket as a round robin grid")
    if len(bracket.match_groups) != 1:
        raise MatchGroupCountError(len(bracket.match_groups), 'round robin')

    settings = section(settings, 'round_robin')
    formatter = formatter or BaseTextFormatter()
    match_group = bracket.match_groups[0]
    matches = match_group.matches
    teams = get_unique_teams(matches)

    grid_size = len(teams) + 1
    row_height = settings['row_height']
    row_width = settings['row_width']
    gap = settings['gap']

    cells = []
    for y in range(grid_size):
        for x in range(grid_size):
            cell = {
                'x': x,
                'y': y,
                'left': x * (row_width + gap),
                'top': y * (row_height + gap),
                'width': row_width,
                'height': row_height,
            }
            if x == 0 and y == 0:
                cell.update({'id': 'corner', 'type': 'blank', 'style': 'blank'})
            elif y == 0:
                team = teams[x - 1]
                cell.update({
                    'id': f'header:top:{x}',
                    'type': 'team_name',
                    'side': 'top',
                    'team_id': team.id,
                    'name': formatter.format_team_name(team.name),
                    'is_disqualified': team.is_disqualified,
                })
            elif x == 0:
                team = teams[y - 1]
                cell.update({
                    'id': f'header:left:{y}',
                    'type': 'team_name',
                    'side': 'left',
                    'team_id': team.id,
                    'name': formatter.format_team_name(team.name),
                    'is_disqualified': team.is_disqualified,
                })
            elif x == y:
                cell.update({'id': f'diagonal:{x}', 'type': 'blank', 'style': 'no-match'})
            else:
                row_team = teams[y - 1]
                column_team = teams[x - 1]
                match = find_match_between(matches, row_team, column_team)
                left_team = top_team = None
                if match is not None:
                    flip = row_team.id == match.bottom_team.id
                    left_team = match.bottom_team if flip else match.top_team
                    top_team = match.top_team if flip else match.bottom_team
                state = match.state if match is not None else UNKNOWN
                cell.update({
                    'id': f'cell:{x}:{y}',
                    'type': 'match',
                    'match_id': match.id if match is not None else None,
                    'state': state,
                    'left_team': format_team(formatter, left_team, top_team, ROUND_ROBIN, state),
                    'top_team': format_team(formatter, top_team, left_team, ROUND_ROBIN, state),
                })
                cell.update(_cell_status(match, left_team, top_team))
            cells.append(cell)

    return {
        'engine': 'round_robin',
        'bracket_type': bracket.type,
        'group_id': match_group.id,
        'group_name': match_group.name,
        'teams': [{'id': team.id, 'name': formatter.format_team_name(team.name)} for team in teams],
        'grid_size': grid_size,
        'cells': cells,
        'width': row_width * grid_size + gap * (grid_size - 1),
        'height': row_height * grid_size + gap * (grid_size - 1),
    }
