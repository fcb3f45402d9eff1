import pytest

from squares_party import db
from squares_party.errors import ValidationError
from squares_party.models import GameAccess, ROLE_PLAYER
from squares_party.services.games import create_game
from conftest import ALICE, STRANGER


def test_grid_requires_identity(client, game):
    res = client.get('/api/squares')
    assert res.status_code == 401


def test_grid_requires_guest_list(client, game, guests, headers_for):
    res = client.get('/api/squares', headers=headers_for(STRANGER))
    assert res.status_code == 403


def test_get_grid(client, game, guests, alice):
    res = client.get('/api/squares', headers=alice)
    assert res.status_code == 200
    data = res.get_json()
    assert len(data['grid']) == 10
    assert data['user_square_count'] == 0
    assert data['max_squares_per_user'] == 5
    assert data['user_email'] == ALICE
    assert data['game']['slug'] == 'main'


def test_claim_and_duplicate_claim(client, game, guests, alice, bob):
    res = client.post('/api/squares', json={'action': 'claim', 'row': 3, 'col': 4}, headers=alice)
    assert res.status_code == 200
    body = res.get_json()
    assert body['success'] is True
    assert body['square']['user_name'] == 'Alice'

    res = client.post('/api/squares', json={'action': 'claim', 'row': 3, 'col': 4}, headers=bob)
    assert res.status_code == 409
    assert res.get_json()['error'] == 'Square already taken'
    assert res.get_json()['square']['user_email'] == ALICE

    grid = client.get('/api/squares', headers=alice).get_json()['grid']
    occupied = [cell for row in grid for cell in row if cell]
    assert len(occupied) == 1


def test_claim_over_quota(client, game, guests, alice):
    game.max_squares_per_user = 1
    db.session.commit()
    assert client.post('/api/squares', json={'action': 'claim', 'row': 0, 'col': 0}, headers=alice).status_code == 200
    res = client.post('/api/squares', json={'action': 'claim', 'row': 0, 'col': 1}, headers=alice)
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Maximum squares reached'
    assert client.get('/api/squares', headers=alice).get_json()['user_square_count'] == 1


def test_invalid_coordinates_and_action(client, game, guests, alice):
    res = client.post('/api/squares', json={'action': 'claim', 'row': 10, 'col': 0}, headers=alice)
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Coordinates out of range'
    res = client.post('/api/squares', json={'action': 'claim', 'row': '1', 'col': 0}, headers=alice)
    assert res.get_json()['error'] == 'Invalid coordinates'
    res = client.post('/api/squares', json={'action': 'steal', 'row': 1, 'col': 0}, headers=alice)
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Invalid action'


def test_release_by_non_owner_and_owner(client, game, guests, alice, bob):
    client.post('/api/squares', json={'action': 'claim', 'row': 2, 'col': 2}, headers=alice)
    res = client.post('/api/squares', json={'action': 'release', 'row': 2, 'col': 2}, headers=bob)
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Cannot release this square'

    res = client.post('/api/squares', json={'action': 'release', 'row': 2, 'col': 2}, headers=alice)
    assert res.status_code == 200
    assert client.get('/api/squares', headers=alice).get_json()['user_square_count'] == 0


def test_locked_game_returns_423(client, game, guests, alice):
    game.is_locked = True
    db.session.commit()
    res = client.get('/api/squares', headers=alice)
    assert res.status_code == 423
    assert res.get_json()['locked'] is True
    res = client.post('/api/squares', json={'action': 'claim', 'row': 0, 'col': 0}, headers=alice)
    assert res.status_code == 423


def test_slug_game_needs_access(client, game, guests, alice):
    side = create_game('office', 'Office Pool')
    res = client.get('/api/squares/office', headers=alice)
    assert res.status_code == 403

    db.session.add(GameAccess(game_id=side.id, user_email=ALICE, role=ROLE_PLAYER))
    db.session.commit()
    res = client.get('/api/squares/office', headers=alice)
    assert res.status_code == 200
    assert res.get_json()['game']['slug'] == 'office'


def test_unknown_game_is_404(client, game, guests, alice):
    assert client.get('/api/squares/nope', headers=alice).status_code == 404


def test_results_payload(client, game, guests, alice):
    client.post('/api/squares', json={'action': 'claim', 'row': 4, 'col': 4}, headers=alice)
    res = client.get('/api/squares/results', headers=alice)
    assert res.status_code == 200
    data = res.get_json()
    assert data['teams'] == {'home': 'Seahawks', 'away': 'Patriots'}
    assert data['axis_numbers'] == {'rows': [None] * 10, 'cols': [None] * 10}
    assert [w['quarter'] for w in data['winners']] == [1, 2, 3, 4]
    assert data['final_score'] == {'home': None, 'away': None}
    assert [s['row'] for s in data['user_squares']] == [4]
    assert data['predictions'] == []


def test_prediction_save_and_read(client, game, guests, alice):
    assert client.get('/api/squares/prediction', headers=alice).get_json() == {'prediction': None}

    res = client.post('/api/squares/prediction', json={'home_score': 27, 'away_score': '24'}, headers=alice)
    assert res.status_code == 200
    assert res.get_json()['prediction']['home_score'] == 27

    res = client.post('/api/squares/prediction', json={'home_score': 20, 'away_score': 17}, headers=alice)
    mine = client.get('/api/squares/prediction', headers=alice).get_json()['prediction']
    assert (mine['home_score'], mine['away_score']) == (20, 17)


def test_prediction_validation_and_lock(client, game, guests, alice):
    res = client.post('/api/squares/prediction', json={'home_score': -1, 'away_score': 3}, headers=alice)
    assert res.status_code == 400
    game.is_locked = True
    db.session.commit()
    res = client.post('/api/squares/prediction', json={'home_score': 1, 'away_score': 3}, headers=alice)
    assert res.status_code == 423


def test_create_game_rejects_reserved_slugs(flask_app):
    for slug in ('results', 'prediction', ''):
        with pytest.raises(ValidationError):
            create_game(slug, 'Bad')


def test_non_object_body_is_400(client, game, guests, alice):
    res = client.post('/api/squares', json=[1, 2], headers=alice)
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Invalid request body'
    res = client.post('/api/squares/prediction', json='27-24', headers=alice)
    assert res.status_code == 400


def test_prediction_rejects_out_of_range_scores(client, game, guests, alice):
    res = client.post('/api/squares/prediction', json={'home_score': 10**30, 'away_score': 1}, headers=alice)
    assert res.status_code == 400
    res = client.post('/api/squares/prediction', json={'home_score': 1000, 'away_score': 1}, headers=alice)
    assert res.status_code == 400
    res = client.post('/api/squares/prediction', data='{"home_score": Infinity, "away_score": 1}',
                      content_type='application/json', headers=alice)
    assert res.status_code == 400
    assert client.get('/api/squares/prediction', headers=alice).get_json() == {'prediction': None}


def test_slug_lookup_ignores_case(client, game, guests, alice):
    side = create_game('office', 'Office Pool')
    db.session.add(GameAccess(game_id=side.id, user_email=ALICE, role=ROLE_PLAYER))
    db.session.commit()
    res = client.get('/api/squares/Office', headers=alice)
    assert res.status_code == 200
    assert res.get_json()['game']['slug'] == 'office'
    res = client.post('/api/squares/OFFICE', json={'action': 'claim', 'row': 1, 'col': 2}, headers=alice)
    assert res.status_code == 200
