"""
Normalized tournament data model consumed by the layout engines.

Snapshots arrive from importers as plain dicts (camelCase keys); the
``from_dict`` constructors accept those and their snake_case equivalents.
"""
from typing import List, Optional

from engine.errors import MalformedBracketError

# Bracket types
SINGLE_ELIMINATION = 'SINGLE_ELIMINATION'
DOUBLE_ELIMINATION = 'DOUBLE_ELIMINATION'
SWISS = 'SWISS'
ROUND_ROBIN = 'ROUND_ROBIN'
LADDER = 'LADDER'
BRACKET_TYPES = (SINGLE_ELIMINATION, DOUBLE_ELIMINATION, SWISS, ROUND_ROBIN, LADDER)
ELIMINATION_TYPES = (SINGLE_ELIMINATION, DOUBLE_ELIMINATION)

# Match types (bracket side)
WINNERS = 'WINNERS'
LOSERS = 'LOSERS'
MATCH_TYPES = (WINNERS, LOSERS)

# Contained match types (which sides a match group holds)
ALL_MATCHES = 'ALL_MATCHES'
CONTAINED_MATCH_TYPES = (ALL_MATCHES, WINNERS, LOSERS)

# Match states
NOT_STARTED = 'NOT_STARTED'
IN_PROGRESS = 'IN_PROGRESS'
COMPLETED = 'COMPLETED'
UNKNOWN = 'UNKNOWN'
MATCH_STATES = (NOT_STARTED, IN_PROGRESS, COMPLETED, UNKNOWN)


def _get(data: dict, camel: str, snake: str, default=None):
    if camel in data:
        return data[camel]
    return data.get(snake, default)


def _parse_choice(value, choices, what: str, aliases: Optional[dict] = None):
    if value is None:
        return None
    normalized = str(value).strip().upper()
    if aliases and normalized in aliases:
        normalized = aliases[normalized]
    if normalized not in choices:
        raise MalformedBracketError(f"Unknown {what} \"{value}\" (expected one of {', '.join(choices)})")
    return normalized


def parse_bracket_type(value) -> str:
    """Normalize an upstream bracket type string."""
    if value is None:
        raise MalformedBracketError("Bracket is missing a type")
    return _parse_choice(value, BRACKET_TYPES, 'bracket type', aliases={
        'SINGLE': SINGLE_ELIMINATION,
        'DOUBLE': DOUBLE_ELIMINATION,
        'ROUNDROBIN': ROUND_ROBIN,
    })


class MatchTeam:
    def __init__(self, id=None, name=None, score=None, is_disqualified=False, is_winner=False, seed=None):
        self.id = id  # None means a bye or an unresolved slot
        self.name = name
        self.score = score
        self.is_disqualified = is_disqualified
        self.is_winner = is_winner
        self.seed = seed

    @classmethod
    def from_dict(cls, data) -> 'MatchTeam':
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise MalformedBracketError(f"Match team must be a mapping, got {type(data).__name__}")
        score = data.get('score')
        if score is not None and not isinstance(score, (int, float)):
            try:
                score = int(score)
            except (TypeError, ValueError):
                raise MalformedBracketError(f"Invalid score \"{score}\" for team {data.get('name')}")
        return cls(
            id=data.get('id'),
            name=data.get('name'),
            score=score,
            is_disqualified=bool(_get(data, 'isDisqualified', 'is_disqualified', False)),
            is_winner=bool(_get(data, 'isWinner', 'is_winner', False)),
            seed=data.get('seed'),
        )

    def __repr__(self):
        return f"MatchTeam(id={self.id}, name={self.name}, score={self.score})"


class Match:
    def __init__(self, id, top_team=None, bottom_team=None, state=UNKNOWN,
                 next_match_id=None, round_number=None, type=None):
        self.id = id
        self.next_match_id = next_match_id  # winner advances here; None for terminal matches
        self.round_number = round_number
        self.type = type
        self.state = state
        self.top_team = top_team if top_team is not None else MatchTeam()
        self.bottom_team = bottom_team if bottom_team is not None else MatchTeam()

    @classmethod
    def from_dict(cls, data) -> 'Match':
        if not isinstance(data, dict):
            raise MalformedBracketError(f"Match must be a mapping, got {type(data).__name__}")
        if data.get('id') is None:
            raise MalformedBracketError("Match is missing an id")
        round_number = _get(data, 'roundNumber', 'round_number')
        if round_number is not None:
            try:
                round_number = int(round_number)
            except (TypeError, ValueError):
                raise MalformedBracketError(f"Invalid round number \"{round_number}\" for match {data['id']}")
        return cls(
            id=data['id'],
            next_match_id=_get(data, 'nextMatchId', 'next_match_id'),
            round_number=round_number,
            type=_parse_choice(data.get('type'), MATCH_TYPES, 'match type'),
            state=_parse_choice(data.get('state'), MATCH_STATES, 'match state') or UNKNOWN,
            top_team=MatchTeam.from_dict(_get(data, 'topTeam', 'top_team')),
            bottom_team=MatchTeam.from_dict(_get(data, 'bottomTeam', 'bottom_team')),
        )

    def __repr__(self):
        return f"Match(id={self.id}, round_number={self.round_number}, next_match_id={self.next_match_id})"


class MatchGroup:
    def __init__(self, id, name=None, matches=None, has_bracket_reset=None, contained_match_type=None):
        self.id = id
        self.name = name
        self.has_bracket_reset = has_bracket_reset
        self.contained_match_type = contained_match_type
        self.matches: List[Match] = matches if matches else []

    @classmethod
    def from_dict(cls, data) -> 'MatchGroup':
        if not isinstance(data, dict):
            raise MalformedBracketError(f"Match group must be a mapping, got {type(data).__name__}")
        matches = data.get('matches') or []
        if not isinstance(matches, list):
            raise MalformedBracketError(f"Matches of group {data.get('id')} must be a list")
        return cls(
            id=data.get('id'),
            name=data.get('name'),
            has_bracket_reset=_get(data, 'hasBracketReset', 'has_bracket_reset'),
            contained_match_type=_parse_choice(
                _get(data, 'containedMatchType', 'contained_match_type'),
                CONTAINED_MATCH_TYPES, 'contained match type', aliases={'ALL': ALL_MATCHES}),
            matches=[Match.from_dict(m) for m in matches],
        )

    def __repr__(self):
        return f"MatchGroup(id={self.id}, name={self.name}, matches={len(self.matches)})"


class Bracket:
    def __init__(self, type, name=None, match_groups=None, round_number=None,
                 id=None, event_name=None, event_id=None):
        self.type = type
        self.name = name
        self.round_number = round_number
        self.match_groups: List[MatchGroup] = match_groups if match_groups else []
        self.id = id
        self.event_name = event_name
        self.event_id = event_id

    @classmethod
    def from_dict(cls, data) -> 'Bracket':
        if not isinstance(data, dict):
            raise MalformedBracketError(f"Bracket must be a mapping, got {type(data).__name__}")
        groups = _get(data, 'matchGroups', 'match_groups') or []
        if not isinstance(groups, list):
            raise MalformedBracketError("Match groups must be a list")
        round_number = _get(data, 'roundNumber', 'round_number')
        if round_number is not None:
            try:
                round_number = int(round_number)
            except (TypeError, ValueError):
                raise MalformedBracketError(f"Invalid bracket round number \"{round_number}\"")
        return cls(
            type=parse_bracket_type(data.get('type')),
            name=data.get('name'),
            round_number=round_number,
            match_groups=[MatchGroup.from_dict(g) for g in groups],
            id=data.get('id'),
            event_name=_get(data, 'eventName', 'event_name'),
            event_id=_get(data, 'eventId', 'event_id'),
        )

    def __repr__(self):
        return f"Bracket(type={self.type}, name={self.name}, match_groups={len(self.match_groups)})"
