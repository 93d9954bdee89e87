"""
Shared pytest fixtures for bracket layout tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - fast subset
"""
import copy
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))


def make_team(team_id, name=None, score=None, is_winner=False, is_disqualified=False):
    """Raw importer-style team dict."""
    team = {'id': team_id, 'name': name if name is not None else team_id}
    if score is not None:
        team['score'] = score
    if is_winner:
        team['isWinner'] = True
    if is_disqualified:
        team['isDisqualified'] = True
    return team


def make_match(match_id, round_number, next_match_id=None, top=None, bottom=None,
               state='NOT_STARTED', match_type=None):
    """Raw importer-style match dict."""
    match = {
        'id': match_id,
        'roundNumber': round_number,
        'nextMatchId': next_match_id,
        'state': state,
        'topTeam': top,
        'bottomTeam': bottom,
    }
    if match_type:
        match['type'] = match_type
    return match


def make_elimination_matches(team_count):
    """Full single elimination tree for a power of two team count.

    Match ids are "r<round>m<index>"; round 1 holds team_count / 2 matches.
    """
    matches = []
    round_number = 1
    match_count = team_count // 2
    while match_count >= 1:
        for i in range(match_count):
            next_id = f'r{round_number + 1}m{i // 2}' if match_count > 1 else None
            top = bottom = None
            if round_number == 1:
                top = make_team(f't{2 * i + 1}', f'Team {2 * i + 1}')
                bottom = make_team(f't{2 * i + 2}', f'Team {2 * i + 2}')
            matches.append(make_match(f'r{round_number}m{i}', round_number, next_id, top, bottom))
        round_number += 1
        match_count //= 2
    return matches


@pytest.fixture
def single_elimination_data():
    """Four team single elimination snapshot: semi-finals done, final running."""
    return {
        'type': 'SINGLE_ELIMINATION',
        'name': 'Spring Cup',
        'matchGroups': [{
            'id': 'main',
            'name': 'Main Bracket',
            'matches': [
                make_match('sf1', 1, 'final',
                           make_team('t1', 'Falcons', 3, is_winner=True),
                           make_team('t4', 'Otters', 1), state='COMPLETED'),
                make_match('sf2', 1, 'final',
                           make_team('t2', 'Herons', 0),
                           make_team('t3', 'Badgers', 2, is_winner=True), state='COMPLETED'),
                make_match('final', 2, None,
                           make_team('t1', 'Falcons', 1),
                           make_team('t3', 'Badgers', 1), state='IN_PROGRESS'),
            ],
        }],
    }


@pytest.fixture
def third_place_data(single_elimination_data):
    """Four team bracket with a third place match between the semi-final losers."""
    data = copy.deepcopy(single_elimination_data)
    data['matchGroups'][0]['matches'].append(
        make_match('bronze', 2, None, make_team('t4', 'Otters'), make_team('t2', 'Herons'),
                   match_type='LOSERS'))
    return data


@pytest.fixture
def double_elimination_data():
    """Four team double elimination snapshot holding both sides.

    Winners: w1, w2 -> w3 -> gf. Losers: l1 -> l2, whose winner meets the
    winners champion in gf.
    """
    return {
        'type': 'DOUBLE_ELIMINATION',
        'name': 'Autumn Cup',
        'matchGroups': [{
            'id': 'de',
            'name': 'Playoffs',
            'containedMatchType': 'ALL_MATCHES',
            'matches': [
                make_match('w1', 1, 'w3', make_team('a', 'Alpha', 2, is_winner=True),
                           make_team('d', 'Delta', 0), state='COMPLETED', match_type='WINNERS'),
                make_match('w2', 1, 'w3', make_team('b', 'Bravo', 1),
                           make_team('c', 'Charlie', 2, is_winner=True), state='COMPLETED',
                           match_type='WINNERS'),
                make_match('w3', 2, 'gf', make_team('a', 'Alpha'), make_team('c', 'Charlie'),
                           match_type='WINNERS'),
                make_match('gf', 3, None, match_type='WINNERS'),
                make_match('l1', 1, 'l2', make_team('d', 'Delta'), make_team('b', 'Bravo'),
                           state='IN_PROGRESS', match_type='LOSERS'),
                make_match('l2', 2, 'gf', match_type='LOSERS'),
            ],
        }],
    }


@pytest.fixture
def round_robin_data():
    """Three team round robin: X beat Y 2-1, Y vs Z not played, X has a bye."""
    return {
        'type': 'ROUND_ROBIN',
        'name': 'Pool A',
        'matchGroups': [{
            'id': 'pool-a',
            'name': 'Pool A',
            'matches': [
                make_match('m0', 1, None, make_team('x', 'X'), {'id': None, 'name': None}),
                make_match('m1', 1, None, make_team('x', 'X', 2), make_team('y', 'Y', 1),
                           state='COMPLETED'),
                make_match('m2', 2, None, make_team('y', 'Y'), make_team('z', 'Z')),
            ],
        }],
    }


@pytest.fixture
def swiss_data():
    """Round 3 of a Swiss stage with four pairings."""
    return {
        'type': 'SWISS',
        'name': 'Swiss Stage',
        'roundNumber': 3,
        'matchGroups': [{
            'id': 'swiss',
            'name': 'Swiss Stage',
            'matches': [
                make_match('s1', 3, None, make_team('a', 'Alpha', 16, is_winner=True),
                           make_team('b', 'Bravo', 9), state='COMPLETED'),
                make_match('s2', 3, None, make_team('c', 'Charlie', 4),
                           make_team('d', 'Delta', 7), state='IN_PROGRESS'),
                make_match('s3', 3, None, make_team('e', 'Echo'), make_team('f', 'Foxtrot')),
                make_match('s4', 3, None, make_team('g', 'Golf'), make_team('h', 'Hotel'),
                           state='COMPLETED'),
            ],
        }],
    }


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Flask test client with default layout settings and no rendered views."""
    import app as app_module
    monkeypatch.setattr(app_module, 'LAYOUT_CONFIG_FILE', str(tmp_path / 'layout.yaml'))
    app_module._views.clear()
    app_module.app.config['TESTING'] = True
    with app_module.app.test_client() as client:
        yield client
    app_module._views.clear()
