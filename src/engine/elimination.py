"""
Layout of single and double elimination brackets.

Each bracket side is reconstructed into a match tree, positioned with the
tidy tree algorithm and converted into absolute cell geometry. The final
round sits in the rightmost column and earlier rounds extend to the left.
When a double elimination group holds both sides, the losers tree is
placed below the winners tree and shifted one column to the right.
"""
import logging
from typing import List, Optional

from engine.config import section
from engine.errors import MatchGroupCountError, MalformedBracketError
from engine.formatter import BaseTextFormatter, TextFormatter, format_team
from engine.hierarchy import HierarchyNode, build_match_hierarchy, filter_matches_by_type
from engine.models import (
    Bracket, ELIMINATION_TYPES, SINGLE_ELIMINATION, DOUBLE_ELIMINATION,
    ALL_MATCHES, WINNERS, LOSERS, IN_PROGRESS, COMPLETED,
)
from engine.round_labels import count_matches_per_round, get_round_names
from engine.tree_layout import tree_layout

logger = logging.getLogger(__name__)

THIRD_PLACE_MATCH_SEPARATION = 2
THIRD_PLACE_MATCH_LABEL = 'Third place match'


def get_cell_separation(tree_height: int) -> float:
    """Spacing multiplier between sibling cells; deep trees are packed tighter."""
    if tree_height == 2:
        return 3
    elif tree_height == 3:
        return 2
    elif tree_height == 4:
        return 1.25
    return 1.1


def get_cell_width(tree_height: int, settings: dict, losers: bool = False) -> float:
    """
    Width of one match cell so the whole tree fits the canvas, clamped to
    the configured bounds. A losers tree sharing the canvas with a winners
    tree reserves one extra column.
    """
    size = settings['bracket_size']
    link_width = settings['link_width']
    if losers:
        result = (size - link_width * tree_height) / (tree_height + 1)
    else:
        result = (size - link_width * (tree_height - 1)) / tree_height
    return max(min(result, settings['max_cell_width']), settings['min_cell_width'])


def measure_hierarchy(root: HierarchyNode, cell_height: float, separation: float) -> float:
    """Vertical extent of a tree: its widest level times the row pitch."""
    count_by_depth = {}
    for node in root.descendants():
        count_by_depth[node.depth] = count_by_depth.get(node.depth, 0) + 1
    widest = max(count_by_depth.values())
    return (widest - 1) * (cell_height * separation) + cell_height


def get_cell_status(match) -> dict:
    """Winner and in-progress flags for a cell."""
    if match.state == IN_PROGRESS:
        return {'in_progress': True, 'winner': None}
    if match.state == COMPLETED:
        winner = None
        if match.top_team.is_winner:
            winner = 'top'
        elif match.bottom_team.is_winner:
            winner = 'bottom'
        return {'in_progress': False, 'winner': winner}
    return {'in_progress': False, 'winner': None}


def layout_single_tree(root: HierarchyNode, settings: dict, cell_width: float, cell_separation: float,
                       bracket_type: str, has_third_place_match: bool = False,
                       is_losers_bracket: bool = False, bracket_title: Optional[str] = None,
                       cell_offset: int = 0, y_offset: float = 0,
                       formatter: Optional[TextFormatter] = None) -> dict:
    """
    Position one bracket side.

    Returns a dict with the side's cells ('nodes'), connecting links,
    round labels, and overall width and height.
    """
    formatter = formatter or BaseTextFormatter()
    cell_height = settings['cell_height']
    link_width = settings['link_width']
    label_height = settings['third_place_match_label_height']
    header_offset = settings['header_height'] + settings['header_spacing']

    if bracket_type == SINGLE_ELIMINATION and has_third_place_match:
        root.sort_children(key=lambda node: 1 if node.match is not None and node.match.type == LOSERS else 0)

    def is_third_place_match(node):
        return has_third_place_match and node.match.type == LOSERS

    def separation(a, b):
        if has_third_place_match and (
                (a.match is not None and a.match.type == LOSERS)
                or (b.match is not None and b.match.type == LOSERS)):
            return THIRD_PLACE_MATCH_SEPARATION
        return cell_separation

    round_names = get_round_names(
        count_matches_per_round(root), is_losers_bracket, bracket_type, has_third_place_match)

    tree_layout(root, (cell_height, cell_width + link_width), separation)

    match_nodes = root.match_nodes()
    x0 = min(node.x for node in match_nodes)
    top_offset = y_offset + header_offset
    bracket_width = cell_width * (root.height + cell_offset) + link_width * (root.height - 1 + cell_offset)

    def cell_left(node):
        return bracket_width - node.y + link_width

    def cell_top(node):
        return node.x - x0 + top_offset

    nodes = []
    for node in match_nodes:
        match = node.match
        third_place = is_third_place_match(node)
        cell = {
            'id': match.id,
            'x': cell_left(node),
            'y': cell_top(node),
            'width': cell_width,
            'height': cell_height + label_height if third_place else cell_height,
            'depth': node.depth,
            'round_number': match.round_number,
            'state': match.state,
            'is_third_place_match': third_place,
            'label': THIRD_PLACE_MATCH_LABEL if third_place else None,
            'top_team': format_team(formatter, match.top_team, match.bottom_team, bracket_type, match.state),
            'bottom_team': format_team(formatter, match.bottom_team, match.top_team, bracket_type, match.state),
        }
        cell.update(get_cell_status(match))
        nodes.append(cell)

    links = []
    for parent, child in root.links():
        links.append({
            'source_id': parent.match.id,
            'target_id': child.match.id,
            'x1': cell_left(child) + cell_width,
            'y1': cell_top(child) + cell_height / 2,
            'x2': cell_left(parent),
            'y2': cell_top(parent) + cell_height / 2,
            'depth': parent.depth,
        })

    column_pitch = cell_width + link_width
    round_labels = [
        {
            'index': i,
            'name': name,
            'x': (cell_offset + i) * column_pitch,
            'y': y_offset,
            'width': cell_width,
        }
        for i, name in enumerate(round_names)
    ]

    return {
        'title': bracket_title,
        'is_losers_bracket': is_losers_bracket,
        'depth': root.height,
        'cell_width': cell_width,
        'cell_separation': cell_separation,
        'y_offset': y_offset,
        'round_labels': round_labels,
        'nodes': nodes,
        'links': links,
        'width': bracket_width,
        'height': measure_hierarchy(root, cell_height, cell_separation) + header_offset,
    }


def _side_matches(matches, side):
    """Matches of one side; untyped matches are kept."""
    return [match for match in matches if match.type is None or match.type == side]


def layout_elimination_bracket(bracket: Bracket, settings: Optional[dict] = None,
                               formatter: Optional[TextFormatter] = None) -> dict:
    """
    Lay out a single or double elimination bracket holding one match group.

    Raises MatchGroupCountError unless exactly one match group is present,
    and MalformedBracketError for data that does not form a tree.
    """
    if bracket.type not in ELIMINATION_TYPES:
        raise MalformedBracketError(f"Cannot lay out a {bracket.type} bracket as an elimination bracket")
    if len(bracket.match_groups) != 1:
        raise MatchGroupCountError(len(bracket.match_groups), 'elimination')

    settings = section(settings, 'elimination')
    formatter = formatter or BaseTextFormatter()
    match_group = bracket.match_groups[0]
    matches = match_group.matches
    contained_match_type = match_group.contained_match_type
    if bracket.type == DOUBLE_ELIMINATION and contained_match_type is None:
        contained_match_type = ALL_MATCHES

    sides: List[dict] = []
    if bracket.type == SINGLE_ELIMINATION or contained_match_type != ALL_MATCHES:
        if bracket.type == DOUBLE_ELIMINATION:
            matches = _side_matches(matches, contained_match_type)
        hierarchy = build_match_hierarchy(matches)
        is_losers_bracket = bracket.type == DOUBLE_ELIMINATION and contained_match_type == LOSERS
        bracket_title = None
        if bracket.type == DOUBLE_ELIMINATION:
            bracket_title = 'Losers Bracket' if is_losers_bracket else 'Winners Bracket'
        side = layout_single_tree(
            hierarchy,
            settings,
            cell_width=get_cell_width(hierarchy.height, settings),
            cell_separation=get_cell_separation(hierarchy.height),
            bracket_type=bracket.type,
            has_third_place_match=bracket.type == SINGLE_ELIMINATION
            and any(match.type == LOSERS for match in matches),
            is_losers_bracket=is_losers_bracket,
            bracket_title=bracket_title,
            formatter=formatter,
        )
        sides.append(side)
        width = side['width']
        height = side['height']
    else:
        winners_hierarchy = build_match_hierarchy(filter_matches_by_type(matches, WINNERS))
        losers_hierarchy = build_match_hierarchy(filter_matches_by_type(matches, LOSERS))
        cell_width = min(get_cell_width(winners_hierarchy.height, settings),
                         get_cell_width(losers_hierarchy.height, settings, losers=True))

        winners = layout_single_tree(
            winners_hierarchy,
            settings,
            cell_width=cell_width,
            cell_separation=get_cell_separation(winners_hierarchy.height),
            bracket_type=bracket.type,
            bracket_title='Winners Bracket',
            formatter=formatter,
        )
        losers = layout_single_tree(
            losers_hierarchy,
            settings,
            cell_width=cell_width,
            cell_separation=get_cell_separation(losers_hierarchy.height),
            bracket_type=bracket.type,
            is_losers_bracket=True,
            bracket_title='Losers Bracket',
            cell_offset=1,
            y_offset=winners['height'] + settings['cell_height'] / 2,
            formatter=formatter,
        )
        sides.extend([winners, losers])
        width = max(winners['width'], losers['width'])
        height = winners['height'] + settings['cell_height'] / 2 + losers['height']

    logger.debug("Laid out %s group %s: %d side(s), %.0fx%.0f",
                 bracket.type, match_group.id, len(sides), width, height)

    return {
        'engine': 'elimination',
        'bracket_type': bracket.type,
        'group_id': match_group.id,
        'group_name': match_group.name,
        'contained_match_type': contained_match_type,
        'depth': max(side['depth'] for side in sides),
        'sides': sides,
        'width': width,
        'height': height,
    }


def iter_cells(layout: dict):
    """All positioned cells of an elimination layout, side by side."""
    for side in layout['sides']:
        for node in side['nodes']:
            yield node
