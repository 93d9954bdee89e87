"""
Unit tests for the data models (Bracket, MatchGroup, Match, MatchTeam).
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from engine.errors import MalformedBracketError
from engine.models import (
    Bracket, Match, MatchGroup, MatchTeam, parse_bracket_type,
    SINGLE_ELIMINATION, DOUBLE_ELIMINATION, ROUND_ROBIN, LADDER,
    ALL_MATCHES, LOSERS, COMPLETED, UNKNOWN,
)


class TestMatchTeam:
    """Tests for the MatchTeam model."""

    def test_from_camel_case(self):
        """Importer keys are camelCase."""
        team = MatchTeam.from_dict({'id': 't1', 'name': 'Falcons', 'score': 3,
                                    'isWinner': True, 'isDisqualified': False, 'seed': 1})
        assert team.id == 't1'
        assert team.name == 'Falcons'
        assert team.score == 3
        assert team.is_winner is True
        assert team.is_disqualified is False
        assert team.seed == 1

    def test_from_snake_case(self):
        """snake_case keys are accepted too."""
        team = MatchTeam.from_dict({'id': 't1', 'name': 'Falcons', 'is_winner': True, 'is_disqualified': True})
        assert team.is_winner is True
        assert team.is_disqualified is True

    def test_missing_team_is_empty_slot(self):
        """A missing team becomes a slot with no id (bye or unresolved)."""
        team = MatchTeam.from_dict(None)
        assert team.id is None
        assert team.name is None
        assert team.score is None

    def test_string_score_is_coerced(self):
        """Numeric strings are turned into ints."""
        assert MatchTeam.from_dict({'id': 't1', 'score': '4'}).score == 4

    def test_invalid_score_raises(self):
        """Non numeric scores are rejected."""
        with pytest.raises(MalformedBracketError):
            MatchTeam.from_dict({'id': 't1', 'score': 'abc'})

    def test_team_must_be_mapping(self):
        with pytest.raises(MalformedBracketError):
            MatchTeam.from_dict(['t1'])


class TestMatch:
    """Tests for the Match model."""

    def test_from_dict(self):
        """All importer fields are read."""
        match = Match.from_dict({
            'id': 'm1', 'roundNumber': 2, 'nextMatchId': 'm5', 'type': 'losers',
            'state': 'COMPLETED', 'topTeam': {'id': 'a'}, 'bottomTeam': {'id': 'b'},
        })
        assert match.id == 'm1'
        assert match.round_number == 2
        assert match.next_match_id == 'm5'
        assert match.type == LOSERS
        assert match.state == COMPLETED
        assert match.top_team.id == 'a'
        assert match.bottom_team.id == 'b'

    def test_defaults(self):
        """Missing state is UNKNOWN and missing teams are empty slots."""
        match = Match.from_dict({'id': 'm1'})
        assert match.state == UNKNOWN
        assert match.round_number is None
        assert match.next_match_id is None
        assert match.type is None
        assert match.top_team.id is None
        assert match.bottom_team.id is None

    def test_missing_id_raises(self):
        with pytest.raises(MalformedBracketError, match='id'):
            Match.from_dict({'roundNumber': 1})

    def test_invalid_round_number_raises(self):
        with pytest.raises(MalformedBracketError):
            Match.from_dict({'id': 'm1', 'roundNumber': 'final'})

    def test_unknown_state_raises(self):
        with pytest.raises(MalformedBracketError, match='match state'):
            Match.from_dict({'id': 'm1', 'state': 'POSTPONED'})

    def test_unknown_type_raises(self):
        with pytest.raises(MalformedBracketError, match='match type'):
            Match.from_dict({'id': 'm1', 'type': 'CONSOLATION'})

    def test_repr(self):
        assert 'm1' in repr(Match('m1', round_number=1))


class TestMatchGroup:
    """Tests for the MatchGroup model."""

    def test_contained_match_type_alias(self):
        """ALL is accepted for ALL_MATCHES."""
        group = MatchGroup.from_dict({'id': 'g', 'containedMatchType': 'ALL', 'matches': []})
        assert group.contained_match_type == ALL_MATCHES

    def test_matches_are_parsed(self):
        group = MatchGroup.from_dict({'id': 'g', 'hasBracketReset': True,
                                      'matches': [{'id': 'a'}, {'id': 'b'}]})
        assert [m.id for m in group.matches] == ['a', 'b']
        assert group.has_bracket_reset is True

    def test_matches_must_be_list(self):
        with pytest.raises(MalformedBracketError):
            MatchGroup.from_dict({'id': 'g', 'matches': {'id': 'a'}})


class TestBracket:
    """Tests for the Bracket model and bracket type parsing."""

    def test_from_dict(self, single_elimination_data):
        """A full snapshot is parsed."""
        bracket = Bracket.from_dict(single_elimination_data)
        assert bracket.type == SINGLE_ELIMINATION
        assert bracket.name == 'Spring Cup'
        assert len(bracket.match_groups) == 1
        assert len(bracket.match_groups[0].matches) == 3

    def test_passthrough_fields(self):
        """Event fields are carried along untouched."""
        bracket = Bracket.from_dict({'type': 'SWISS', 'id': 'b1', 'eventName': 'Open', 'eventId': 7,
                                     'roundNumber': '2'})
        assert bracket.id == 'b1'
        assert bracket.event_name == 'Open'
        assert bracket.event_id == 7
        assert bracket.round_number == 2

    def test_bracket_type_aliases(self):
        assert parse_bracket_type('single') == SINGLE_ELIMINATION
        assert parse_bracket_type('DOUBLE') == DOUBLE_ELIMINATION
        assert parse_bracket_type('roundRobin') == ROUND_ROBIN
        assert parse_bracket_type('LADDER') == LADDER

    def test_unknown_bracket_type_raises(self):
        with pytest.raises(MalformedBracketError, match='bracket type'):
            Bracket.from_dict({'type': 'KNOCKOUT'})

    def test_missing_bracket_type_raises(self):
        with pytest.raises(MalformedBracketError):
            Bracket.from_dict({'name': 'No type'})

    def test_bracket_must_be_mapping(self):
        with pytest.raises(MalformedBracketError):
            Bracket.from_dict('SINGLE_ELIMINATION')
