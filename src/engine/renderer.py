"""
Dispatch from bracket type to layout engine, plus the render step that
ties layout and reconciliation together.
"""
import logging
from typing import Optional

from engine.elimination import layout_elimination_bracket
from engine.errors import UnsupportedBracketTypeError, MissingParameterError
from engine.formatter import BaseTextFormatter, TextFormatter
from engine.models import Bracket, SINGLE_ELIMINATION, DOUBLE_ELIMINATION, SWISS, ROUND_ROBIN
from engine.reconcile import RenderState, reconcile
from engine.round_robin import build_round_robin_grid
from engine.swiss import layout_swiss_round

logger = logging.getLogger(__name__)

# Each engine and the bracket types it can lay out
LAYOUT_ENGINES = [
    ('elimination', (SINGLE_ELIMINATION, DOUBLE_ELIMINATION), layout_elimination_bracket),
    ('swiss', (SWISS,), layout_swiss_round),
    ('round_robin', (ROUND_ROBIN,), build_round_robin_grid),
]


def get_layout_engine(bracket_type: str):
    """Return ``(engine_name, layout_function)`` for a bracket type."""
    for name, compatible_types, layout in LAYOUT_ENGINES:
        if bracket_type in compatible_types:
            return name, layout
    raise UnsupportedBracketTypeError(bracket_type)


def validate_bracket_request(bracket: Bracket):
    """Check the selectors a bracket type needs before any layout work."""
    if bracket.type == SWISS and bracket.round_number is None:
        raise MissingParameterError('round number', SWISS)
    if bracket.type == ROUND_ROBIN:
        for group in bracket.match_groups:
            if group.id is None:
                raise MissingParameterError('group id', ROUND_ROBIN)


class BracketRenderer:
    """
    Lays out successive snapshots of one view and diffs each against the
    previous one.

    Calls must be serialized by the caller. The renderer only keeps the
    last RenderState; every call recomputes the layout from scratch.
    """

    def __init__(self, settings: Optional[dict] = None, formatter: Optional[TextFormatter] = None):
        self.settings = settings
        self.formatter = formatter or BaseTextFormatter()
        self.state: Optional[RenderState] = None

    def layout(self, bracket: Bracket) -> dict:
        return layout_bracket(bracket, self.settings, self.formatter)

    def set_data(self, bracket: Bracket) -> dict:
        """Lay out ``bracket`` and reconcile it against what was rendered last."""
        result, self.state = render(bracket, self.state, self.settings, self.formatter)
        return result

    def reset(self):
        self.state = None


def layout_bracket(bracket: Bracket, settings: Optional[dict] = None,
                   formatter: Optional[TextFormatter] = None) -> dict:
    """Validate ``bracket`` and run the layout engine matching its type."""
    validate_bracket_request(bracket)
    _, layout = get_layout_engine(bracket.type)
    return layout(bracket, settings, formatter)


def render(bracket: Bracket, previous_state: Optional[RenderState] = None,
           settings: Optional[dict] = None, formatter: Optional[TextFormatter] = None):
    """
    Pure render step: ``(previous_state, snapshot) -> (result, next_state)``.

    ``result`` holds the layout plus the reconciliation outcome. Errors
    propagate before any state is produced.
    """
    layout = layout_bracket(bracket, settings, formatter)
    outcome, next_state = reconcile(previous_state, layout)
    result = {'layout': layout}
    result.update(outcome)
    logger.info("Rendered %s bracket %s (group %s): full_rebuild=%s, %d update(s)",
                bracket.type, bracket.name, layout['group_id'], outcome['full_rebuild'],
                outcome['summary']['update'])
    return result, next_state
