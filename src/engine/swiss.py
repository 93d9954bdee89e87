"""
Swiss round list layout and autoscroll pacing.
"""
import math
from typing import Optional

from engine.config import section
from engine.errors import MatchGroupCountError, MalformedBracketError
from engine.formatter import BaseTextFormatter, TextFormatter, format_team
from engine.models import Bracket, SWISS


def layout_swiss_round(bracket: Bracket, settings: Optional[dict] = None,
                       formatter: Optional[TextFormatter] = None) -> dict:
    """Ordered rows for the matches of the active Swiss round."""
    if bracket.type != SWISS:
        raise MalformedBracketError(f"Cannot lay out a {bracket.type} bracket as a Swiss round")
    if len(bracket.match_groups) != 1:
        raise MatchGroupCountError(len(bracket.match_groups), 'swiss')

    settings = section(settings, 'swiss')
    formatter = formatter or BaseTextFormatter()
    match_group = bracket.match_groups[0]
    row_height = settings['row_height']
    row_gap = settings['row_gap']

    rows = []
    for index, match in enumerate(match_group.matches):
        rows.append({
            'id': match.id,
            'index': index,
            'y': index * (row_height + row_gap),
            'height': row_height,
            'state': match.state,
            'top_team': format_team(formatter, match.top_team, match.bottom_team, SWISS, match.state),
            'bottom_team': format_team(formatter, match.bottom_team, match.top_team, SWISS, match.state),
        })

    return {
        'engine': 'swiss',
        'bracket_type': bracket.type,
        'group_id': match_group.id,
        'group_name': match_group.name,
        'round_number': bracket.round_number,
        'rows': rows,
        'width': None,
        'height': len(rows) * (row_height + row_gap) - row_gap if rows else 0,
    }


class Autoscroller:
    """
    Pacing for a list taller than its viewport: hold, scroll one screen
    down, and so on to the bottom, then scroll back to the top.

    The object only does the arithmetic. The caller animates each step
    it returns and asks for the next one when the step finishes; calling
    stop() abandons the cycle and resets to the top.
    """

    def __init__(self, row_height, row_gap, hold_delay_ms=5000, scroll_duration_ms=750):
        self.row_height = row_height
        self.row_gap = row_gap
        self.hold_delay_ms = hold_delay_ms
        self.scroll_duration_ms = scroll_duration_ms
        self.rows_per_screen = 1
        self.viewport_height = row_height
        self.direction = 'up'
        self.scroll_top = 0

    @classmethod
    def from_settings(cls, settings=None):
        swiss = section(settings, 'swiss')
        return cls(swiss['row_height'], swiss['row_gap'], swiss['hold_delay_ms'], swiss['scroll_duration_ms'])

    def set_viewport_height(self, height):
        """Fit whole rows into ``height``; returns the usable inner height."""
        pitch = self.row_height + self.row_gap
        self.rows_per_screen = max(math.floor((height + self.row_gap) / pitch), 1)
        self.viewport_height = self.rows_per_screen * pitch - self.row_gap
        return self.viewport_height

    def max_scroll_top(self, content_height):
        return max(content_height - self.viewport_height, 0)

    def _scrolling_finished(self, content_height):
        if self.direction == 'up':
            return self.scroll_top <= 0
        return abs(self.max_scroll_top(content_height) - self.scroll_top) < 1

    def next_step(self, content_height):
        """The next scheduled scroll: wait ``delay_ms`` then move over ``duration_ms``."""
        if self._scrolling_finished(content_height):
            self.direction = 'down' if self.direction == 'up' else 'up'

        scroll_from = self.scroll_top
        if self.direction == 'up':
            scroll_to = 0
        else:
            page = (self.row_height + self.row_gap) * max(self.rows_per_screen - 1, 1)
            scroll_to = min(scroll_from + page, self.max_scroll_top(content_height))
        self.scroll_top = scroll_to

        return {
            'from': scroll_from,
            'to': scroll_to,
            'direction': self.direction,
            'delay_ms': self.hold_delay_ms,
            'duration_ms': self.scroll_duration_ms,
        }

    def stop(self):
        self.direction = 'up'
        self.scroll_top = 0
