from flask import Blueprint, current_app, jsonify
from flask_login import current_user

from squares_party.auth import approved_required
from squares_party.errors import GameLocked, ValidationError
from squares_party.messages import message
from squares_party.payload import json_body
from squares_party.services.games import require_game_access
from squares_party.services.squares.axis import get_axis_numbers
from squares_party.services.squares.grid import (
    build_grid,
    claim_square,
    count_squares,
    get_all_squares,
    get_squares_by_owner,
    release_square,
    serialize_grid,
    validate_coordinates,
)
from squares_party.services.squares.predictions import get_all_predictions, get_prediction, parse_score, upsert_prediction
from squares_party.services.squares.scoring import calculate_prediction_results, calculate_winners, get_scores
from squares_party.socketio_events import notify_squares_update


squares = Blueprint('squares', __name__)


def _teams():
    cfg = current_app.config
    return {'home': cfg.get('HOME_TEAM_NAME'), 'away': cfg.get('AWAY_TEAM_NAME')}


@squares.route('', methods=['GET'], defaults={'slug': None})
@squares.route('/<string:slug>', methods=['GET'])
@approved_required
def get_grid(slug):
    """Grid state for polling. 423 once the game is locked so clients switch to results."""
    game = require_game_access(current_user, slug)
    if game.is_locked:
        raise GameLocked()
    return jsonify({
        'game': game.to_dict(),
        'grid': serialize_grid(build_grid(get_all_squares(game.id))),
        'user_square_count': count_squares(game.id, email=current_user.email),
        'max_squares_per_user': game.max_squares_per_user,
        'user_email': current_user.email,
    })


@squares.route('', methods=['POST'], defaults={'slug': None})
@squares.route('/<string:slug>', methods=['POST'])
@approved_required
def update_square(slug):
    """Body: {"action": "claim" | "release", "row": int, "col": int}"""
    game = require_game_access(current_user, slug)
    if game.is_locked:
        raise GameLocked()

    data = json_body()
    action = data.get('action')
    row, col = data.get('row'), data.get('col')
    validate_coordinates(row, col)

    if action == 'claim':
        square = claim_square(
            game, row, col,
            email=current_user.email,
            name=current_user.name,
            image=current_user.image,
        )
        current_app.logger.info(f"[claim] game={game.slug} ({row},{col}) by={current_user.email}")
        notify_squares_update(game.slug, 'claim')
        return jsonify(message('square_claimed', square=square.to_dict()))

    if action == 'release':
        if not release_square(game.id, row, col, email=current_user.email):
            raise ValidationError('Cannot release this square')
        current_app.logger.info(f"[release] game={game.slug} ({row},{col}) by={current_user.email}")
        notify_squares_update(game.slug, 'release')
        return jsonify(message('square_released'))

    raise ValidationError('Invalid action')


@squares.route('/results', methods=['GET'], defaults={'slug': None})
@squares.route('/<string:slug>/results', methods=['GET'])
@approved_required
def get_results(slug):
    game = require_game_access(current_user, slug)
    ranked = calculate_prediction_results(
        get_all_predictions(game.id), game.final_home_score, game.final_away_score,
    )
    all_squares = get_all_squares(game.id)
    return jsonify({
        'game': game.to_dict(),
        'teams': _teams(),
        'grid': serialize_grid(build_grid(all_squares)),
        'user_squares': [s.to_dict() for s in get_squares_by_owner(game.id, email=current_user.email)],
        'axis_numbers': get_axis_numbers(game.id),
        'scores': [s.to_dict() for s in get_scores()],
        'winners': calculate_winners(game),
        'final_score': {'home': game.final_home_score, 'away': game.final_away_score},
        'predictions': [
            {'prediction': r['prediction'].to_dict(), 'diff': r['diff'], 'is_winner': r['is_winner']}
            for r in ranked
        ],
    })


@squares.route('/prediction', methods=['GET'], defaults={'slug': None})
@squares.route('/<string:slug>/prediction', methods=['GET'])
@approved_required
def get_my_prediction(slug):
    game = require_game_access(current_user, slug)
    prediction = get_prediction(game.id, email=current_user.email)
    return jsonify({'prediction': prediction.to_dict() if prediction else None})


@squares.route('/prediction', methods=['POST'], defaults={'slug': None})
@squares.route('/<string:slug>/prediction', methods=['POST'])
@approved_required
def save_prediction(slug):
    """Body: {"home_score": int, "away_score": int}. Closed once the game locks."""
    game = require_game_access(current_user, slug)
    if game.is_locked:
        current_app.logger.warning(f"[prediction] rejected, game={game.slug} locked, by={current_user.email}")
        raise GameLocked()
    data = json_body()
    home_score = parse_score(data.get('home_score'), 'home_score')
    away_score = parse_score(data.get('away_score'), 'away_score')
    prediction = upsert_prediction(
        game, home_score, away_score,
        email=current_user.email,
        name=current_user.display_name,
    )
    current_app.logger.info(
        f"[prediction] game={game.slug} by={current_user.email} home={home_score} away={away_score}"
    )
    return jsonify(message('prediction_saved', prediction=prediction.to_dict()))
