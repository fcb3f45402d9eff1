import pytest

from squares_party import db
from squares_party.errors import AxisNumbersCorrupt, ValidationError
from squares_party.models import AxisNumber
from squares_party.services.games import reset_game, set_final_score
from squares_party.services.squares.grid import claim_square, get_all_squares
from squares_party.services.squares.predictions import (
    get_all_predictions,
    parse_score,
    upsert_prediction,
)
from squares_party.services.squares.scoring import (
    STATUS_AWAITING_NUMBERS,
    STATUS_UNCLAIMED,
    STATUS_UNDETERMINED,
    STATUS_WON,
    calculate_prediction_results,
    calculate_winners,
    get_scores,
    set_score,
)
from conftest import ALICE, BOB

# Column position 3 holds 4, row position 7 holds 1
COLS = [0, 1, 2, 4, 3, 5, 6, 7, 8, 9]
ROWS = [0, 7, 2, 3, 4, 5, 6, 1, 8, 9]


def _store_axis(game_id, rows, cols):
    for position, value in enumerate(rows):
        db.session.add(AxisNumber(game_id=game_id, axis='row', position=position, value=value))
    for position, value in enumerate(cols):
        db.session.add(AxisNumber(game_id=game_id, axis='col', position=position, value=value))
    db.session.commit()


def test_quarter_winner_from_last_digits(game):
    _store_axis(game.id, ROWS, COLS)
    claim_square(game, 7, 3, email=ALICE, name='Alice')
    set_score(1, 24, 31)

    q1 = calculate_winners(game)[0]
    assert q1['status'] == STATUS_WON
    assert q1['home_last_digit'] == 4
    assert q1['away_last_digit'] == 1
    assert (q1['winning_row'], q1['winning_col']) == (7, 3)
    assert q1['winning_square']['user_email'] == ALICE


def test_null_score_is_undetermined(game):
    _store_axis(game.id, ROWS, COLS)
    set_score(2, 14, None)

    q2 = calculate_winners(game)[1]
    assert q2['status'] == STATUS_UNDETERMINED
    for field in ('home_last_digit', 'away_last_digit', 'winning_row', 'winning_col', 'winning_square'):
        assert q2[field] is None


def test_unclaimed_winning_cell(game):
    _store_axis(game.id, ROWS, COLS)
    set_score(3, 10, 20)

    q3 = calculate_winners(game)[2]
    assert q3['status'] == STATUS_UNCLAIMED
    assert (q3['winning_row'], q3['winning_col']) == (0, 0)
    assert q3['winning_square'] is None


def test_scores_without_axis_numbers_await_numbers(game):
    set_score(1, 7, 3)
    q1 = calculate_winners(game)[0]
    assert q1['status'] == STATUS_AWAITING_NUMBERS
    assert (q1['home_last_digit'], q1['away_last_digit']) == (7, 3)
    assert q1['winning_square'] is None


def test_corrupt_axis_numbers_raise(game):
    _store_axis(game.id, ROWS[:9], COLS)
    set_score(1, 7, 3)
    with pytest.raises(AxisNumbersCorrupt) as exc:
        calculate_winners(game)
    assert exc.value.status_code == 500


def test_always_four_quarters(game):
    results = calculate_winners(game)
    assert [r['quarter'] for r in results] == [1, 2, 3, 4]
    assert all(r['status'] == STATUS_UNDETERMINED for r in results)


def test_set_score_validation():
    with pytest.raises(ValidationError):
        set_score(5, 1, 1)
    with pytest.raises(ValidationError):
        set_score(1, -3, 0)


def test_set_score_overwrites(game):
    set_score(1, 3, 0)
    set_score(1, 7, 3)
    assert [(s.quarter, s.home_score, s.away_score) for s in get_scores()] == [(1, 7, 3)]


@pytest.mark.parametrize('value', [None, '', -1, 'abc', 2.5, 3.0, True, float('inf'), float('nan'), 10**30, 1000])
def test_parse_score_rejects(flask_app, value):
    with pytest.raises(ValidationError):
        parse_score(value, 'home_score')


def test_parse_score_accepts_numeric_strings(flask_app):
    assert parse_score('17', 'home_score') == 17
    assert parse_score(0, 'home_score') == 0
    assert parse_score(999, 'home_score') == 999


def test_parse_score_cap_follows_config(flask_app):
    flask_app.config['MAX_SCORE'] = 60
    assert parse_score(60, 'home_score') == 60
    with pytest.raises(ValidationError):
        parse_score(61, 'home_score')


def test_prediction_ranking_closest_first(game):
    upsert_prediction(game, 18, 20, email=ALICE, name='Alice')
    upsert_prediction(game, 21, 16, email=BOB, name='Bob')
    ranked = calculate_prediction_results(get_all_predictions(game.id), 20, 17)

    assert [r['prediction'].user_email for r in ranked] == [BOB, ALICE]
    assert [r['diff'] for r in ranked] == [2, 5]
    assert [r['is_winner'] for r in ranked] == [True, False]


def test_prediction_ties_are_co_winners_in_creation_order(game, proxy):
    upsert_prediction(game, 21, 17, email=ALICE)
    upsert_prediction(game, 19, 17, proxy=proxy, created_by='admin@example.com')
    upsert_prediction(game, 30, 0, email=BOB)
    ranked = calculate_prediction_results(get_all_predictions(game.id), 20, 17)

    assert [r['diff'] for r in ranked] == [1, 1, 30]
    assert ranked[0]['prediction'].user_email == ALICE
    assert ranked[1]['prediction'].proxy_id == proxy.id
    assert [r['is_winner'] for r in ranked] == [True, True, False]


def test_predictions_unranked_without_final_score(game):
    upsert_prediction(game, 18, 20, email=ALICE)
    ranked = calculate_prediction_results(get_all_predictions(game.id), None, 17)
    assert ranked[0]['diff'] is None
    assert ranked[0]['is_winner'] is False


def test_upsert_prediction_updates_in_place(game):
    first = upsert_prediction(game, 10, 10, email=ALICE)
    second = upsert_prediction(game, 24, 21, email=ALICE)
    assert first.id == second.id
    assert [(p.home_score, p.away_score) for p in get_all_predictions(game.id)] == [(24, 21)]


def test_reset_game_clears_state_but_keeps_axis(game):
    _store_axis(game.id, ROWS, COLS)
    claim_square(game, 1, 1, email=ALICE)
    upsert_prediction(game, 1, 1, email=ALICE)
    set_score(1, 7, 0)
    set_final_score(game, 28, 21)
    game.is_locked = True
    db.session.commit()

    reset_game(game)

    assert get_all_squares(game.id) == []
    assert get_all_predictions(game.id) == []
    assert get_scores() == []
    assert game.is_locked is False
    assert (game.final_home_score, game.final_away_score) == (None, None)
    assert AxisNumber.query.filter_by(game_id=game.id).count() == 20
