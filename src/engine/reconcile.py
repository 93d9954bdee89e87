"""
Keyed diff between what was last rendered and a newly computed layout.

Every visual text field (team names, formatted scores, round robin
headers) is keyed by its unit id and field name. Comparing the new text
with the previously rendered text classifies each field:

- enter:     the unit was not rendered before (no value animation)
- update:    the text changed (animate from old to new)
- unchanged: identical text, leave the element alone
- exit:      Swiss only, the match left the current round

Switching to another match group, bracket side selection, Swiss round,
round robin grid size or engine is a full rebuild: the old view is hidden
and everything enters again.
"""
import logging
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

ENTER = 'enter'
UPDATE = 'update'
UNCHANGED = 'unchanged'
EXIT = 'exit'

_TEAM_FIELDS = (
    ('top_team_name', 'top_team', 'name'),
    ('top_score', 'top_team', 'score'),
    ('bottom_team_name', 'bottom_team', 'name'),
    ('bottom_score', 'bottom_team', 'score'),
)


class RenderState:
    """What one view has on screen. Replaced wholesale after each render."""

    def __init__(self, engine=None, group_id=None, view_key=None, rendered=None, layout=None):
        self.engine = engine
        self.group_id = group_id
        self.view_key = view_key
        self.rendered: Dict[Tuple[object, str], str] = rendered if rendered else {}
        self.layout = layout

    def __repr__(self):
        return (f"RenderState(engine={self.engine}, group_id={self.group_id}, "
                f"view_key={self.view_key}, fields={len(self.rendered)})")


def get_view_key(layout: dict):
    """The part of a layout whose change forces a full rebuild, besides engine and group."""
    engine = layout['engine']
    if engine == 'elimination':
        return layout['contained_match_type']
    if engine == 'swiss':
        return layout['round_number']
    if engine == 'round_robin':
        return layout['grid_size']
    return None


def extract_rendered_fields(layout: dict) -> List[Tuple[object, str, str]]:
    """(unit id, field, text) for every visual text field of a layout, in render order."""
    engine = layout['engine']
    fields = []
    if engine == 'elimination':
        for side in layout['sides']:
            for node in side['nodes']:
                for field, slot, key in _TEAM_FIELDS:
                    fields.append((node['id'], field, node[slot][key]))
    elif engine == 'swiss':
        for row in layout['rows']:
            for field, slot, key in _TEAM_FIELDS:
                fields.append((row['id'], field, row[slot][key]))
    elif engine == 'round_robin':
        for cell in layout['cells']:
            if cell['type'] == 'team_name':
                fields.append((cell['id'], 'team_name', cell['name']))
            elif cell['type'] == 'match':
                fields.append((cell['id'], 'left_score', cell['left_team']['score']))
                fields.append((cell['id'], 'top_score', cell['top_team']['score']))
    else:
        raise ValueError(f"Unknown layout engine \"{engine}\"")
    return fields


def needs_full_rebuild(previous_state: Optional[RenderState], layout: dict) -> bool:
    if previous_state is None or previous_state.engine is None:
        return True
    return (previous_state.engine != layout['engine']
            or previous_state.group_id != layout['group_id']
            or previous_state.view_key != get_view_key(layout))


def _action(unit_id, field, kind, old_value, new_value):
    return {
        'id': unit_id,
        'field': field,
        'kind': kind,
        'old_value': old_value,
        'new_value': new_value,
    }


def reconcile(previous_state: Optional[RenderState], layout: dict):
    """
    Diff ``layout`` against ``previous_state``.

    Returns ``(result, next_state)``; ``previous_state`` is not modified.
    ``result`` holds ``full_rebuild``, ``hide_previous`` (an earlier view
    is on screen and must be hidden first), the per-field ``actions`` and
    a count per action kind.
    """
    full_rebuild = needs_full_rebuild(previous_state, layout)
    fields = extract_rendered_fields(layout)
    previous = {} if full_rebuild else previous_state.rendered

    actions = []
    rendered = {}
    for unit_id, field, text in fields:
        key = (unit_id, field)
        rendered[key] = text
        if key not in previous:
            actions.append(_action(unit_id, field, ENTER, None, text))
        elif previous[key] != text:
            actions.append(_action(unit_id, field, UPDATE, previous[key], text))
        else:
            actions.append(_action(unit_id, field, UNCHANGED, text, text))

    if layout['engine'] == 'swiss':
        for (unit_id, field), text in previous.items():
            if (unit_id, field) not in rendered:
                actions.append(_action(unit_id, field, EXIT, text, None))

    summary = {ENTER: 0, UPDATE: 0, UNCHANGED: 0, EXIT: 0}
    for action in actions:
        summary[action['kind']] += 1

    if full_rebuild:
        logger.debug("Full rebuild of %s group %s", layout['engine'], layout['group_id'])
    logger.debug("Reconciled %s group %s: %s", layout['engine'], layout['group_id'], summary)

    next_state = RenderState(
        engine=layout['engine'],
        group_id=layout['group_id'],
        view_key=get_view_key(layout),
        rendered=rendered,
        layout=layout,
    )
    result = {
        'full_rebuild': full_rebuild,
        'hide_previous': full_rebuild and previous_state is not None and previous_state.engine is not None,
        'actions': actions,
        'summary': summary,
    }
    return result, next_state


def changed_actions(result: dict) -> List[dict]:
    """Only the actions that need an animation."""
    return [action for action in result['actions'] if action['kind'] == UPDATE]
