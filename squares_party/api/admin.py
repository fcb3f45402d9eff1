from flask import Blueprint, current_app, jsonify
from flask_login import current_user

from squares_party.auth import admin_required, approved_required
from squares_party.errors import NotFound, ValidationError
from squares_party.messages import message
from squares_party.payload import json_body, parse_int
from squares_party.services.games import (
    require_game_admin,
    reset_game,
    set_final_score,
    set_game_locked,
    set_game_max_squares,
    toggle_game_locked,
)
from squares_party.services.party.entries import clean_entry_fields, create_entry, delete_proxy_entry
from squares_party.services.party.votes import get_votes_with_entries, parse_ballot, upsert_vote
from squares_party.services.proxies import create_proxy, get_proxy, list_proxies
from squares_party.services.settings import SETTING_KEYS, get_site_settings, set_setting, toggle_setting
from squares_party.services.squares.axis import get_axis_numbers
from squares_party.services.squares.grid import (
    admin_release_square,
    build_grid,
    claim_square,
    clear_all_squares,
    get_all_squares,
    release_squares_by_owner,
    serialize_grid,
    validate_coordinates,
)
from squares_party.services.squares.predictions import (
    delete_prediction,
    get_all_predictions,
    parse_score,
    upsert_prediction,
)
from squares_party.services.squares.scoring import clear_all_scores, get_scores, set_score
from squares_party.socketio_events import notify_squares_update


admin = Blueprint('admin', __name__)


def _optional_score(value, field):
    if value is None or value == '':
        return None
    return parse_score(value, field)


def _flag(data, field):
    value = data.get(field)
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ('true', 'false'):
        return value.strip().lower() == 'true'
    raise ValidationError(f'{field} must be true or false')


# --- Squares -----------------------------------------------------------------

@admin.route('/squares', methods=['GET'], defaults={'slug': None})
@admin.route('/squares/<string:slug>', methods=['GET'])
@approved_required
def get_admin_grid(slug):
    game = require_game_admin(current_user, slug)
    return jsonify({
        'game': game.to_dict(),
        'grid': serialize_grid(build_grid(get_all_squares(game.id))),
        'max_squares_per_user': game.max_squares_per_user,
        'axis_numbers': get_axis_numbers(game.id),
        'scores': [s.to_dict() for s in get_scores()],
        'predictions': [p.to_dict() for p in get_all_predictions(game.id)],
        'proxies': [p.to_dict() for p in list_proxies()],
    })


@admin.route('/squares', methods=['PUT'], defaults={'slug': None})
@admin.route('/squares/<string:slug>', methods=['PUT'])
@approved_required
def proxy_squares(slug):
    """Proxy operations on the grid: create_proxy, proxy_claim, proxy_release, release_all_by_user."""
    game = require_game_admin(current_user, slug)
    data = json_body()
    action = data.get('action')

    if action == 'create_proxy':
        proxy = create_proxy(data.get('display_name'), created_by=current_user.email)
        current_app.logger.info(f"[proxy] created id={proxy.id} name={proxy.display_name!r} by={current_user.email}")
        return jsonify({'success': True, 'proxy': proxy.to_dict()}), 201

    if action == 'proxy_claim':
        row, col = data.get('row'), data.get('col')
        validate_coordinates(row, col)
        proxy = get_proxy(data.get('proxy_id'))
        square = claim_square(game, row, col, proxy=proxy)
        current_app.logger.info(
            f"[proxy_claim] game={game.slug} ({row},{col}) proxy={proxy.id} by={current_user.email}"
        )
        notify_squares_update(game.slug, 'proxy_claim')
        return jsonify({'success': True, 'square': square.to_dict()})

    if action == 'proxy_release':
        row, col = data.get('row'), data.get('col')
        validate_coordinates(row, col)
        if not admin_release_square(game.id, row, col):
            raise ValidationError('Square not found')
        current_app.logger.info(f"[proxy_release] game={game.slug} ({row},{col}) by={current_user.email}")
        notify_squares_update(game.slug, 'proxy_release')
        return jsonify({'success': True})

    if action == 'release_all_by_user':
        proxy = get_proxy(data.get('proxy_id'))
        count = release_squares_by_owner(game.id, proxy_id=proxy.id)
        current_app.logger.info(
            f"[release_all] game={game.slug} proxy={proxy.id} released={count} by={current_user.email}"
        )
        notify_squares_update(game.slug, 'release_all_by_user')
        return jsonify({'success': True, 'released_count': count})

    current_app.logger.warning(f"[admin] unknown proxy action {action!r} by={current_user.email}")
    raise ValidationError('Invalid action')


@admin.route('/squares', methods=['POST'], defaults={'slug': None})
@admin.route('/squares/<string:slug>', methods=['POST'])
@approved_required
def squares_action(slug):
    game = require_game_admin(current_user, slug)
    data = json_body()
    action = data.get('action')
    who = current_user.email

    if action == 'toggle_squares_locked':
        locked = toggle_game_locked(game)
        current_app.logger.info(f"[lock] game={game.slug} locked={locked} by={who}")
        notify_squares_update(game.slug, 'lock')
        return jsonify({'success': True, 'game': game.to_dict(), 'axis_numbers': get_axis_numbers(game.id)})

    if action == 'set_locked':
        changed = set_game_locked(game, _flag(data, 'locked'))
        current_app.logger.info(f"[lock] game={game.slug} locked={game.is_locked} changed={changed} by={who}")
        if changed:
            notify_squares_update(game.slug, 'lock')
        return jsonify({'success': True, 'game': game.to_dict(), 'axis_numbers': get_axis_numbers(game.id)})

    if action == 'set_max_squares':
        set_game_max_squares(game, parse_int(data.get('max_squares'), 'max_squares'))
        current_app.logger.info(f"[max_squares] game={game.slug} max={game.max_squares_per_user} by={who}")
        return jsonify({'success': True, 'game': game.to_dict()})

    if action == 'set_score':
        quarter = parse_int(data.get('quarter'), 'quarter')
        score = set_score(
            quarter,
            _optional_score(data.get('home_score'), 'home_score'),
            _optional_score(data.get('away_score'), 'away_score'),
        )
        current_app.logger.info(
            f"[score] Q{quarter} home={score.home_score} away={score.away_score} by={who}"
        )
        return jsonify({'success': True, 'score': score.to_dict()})

    if action == 'set_final_score':
        set_final_score(
            game,
            _optional_score(data.get('home_score'), 'home_score'),
            _optional_score(data.get('away_score'), 'away_score'),
        )
        current_app.logger.info(
            f"[final_score] game={game.slug} home={game.final_home_score} away={game.final_away_score} by={who}"
        )
        return jsonify({'success': True, 'game': game.to_dict()})

    if action == 'proxy_prediction':
        proxy = get_proxy(data.get('proxy_id'))
        prediction = upsert_prediction(
            game,
            parse_score(data.get('home_score'), 'home_score'),
            parse_score(data.get('away_score'), 'away_score'),
            proxy=proxy,
            created_by=who,
        )
        current_app.logger.info(f"[proxy_prediction] game={game.slug} proxy={proxy.id} by={who}")
        return jsonify({'success': True, 'prediction': prediction.to_dict()})

    if action == 'delete_prediction':
        prediction_id = parse_int(data.get('prediction_id'), 'prediction_id')
        if not delete_prediction(game.id, prediction_id):
            raise NotFound('Prediction not found')
        current_app.logger.info(f"[prediction] deleted id={prediction_id} game={game.slug} by={who}")
        return jsonify({'success': True})

    if action == 'clear_all_squares':
        count = clear_all_squares(game.id)
        current_app.logger.info(f"[clear_squares] game={game.slug} cleared={count} by={who}")
        notify_squares_update(game.slug, 'clear_all_squares')
        return jsonify({'success': True, 'cleared_count': count})

    if action == 'clear_all_scores':
        clear_all_scores()
        current_app.logger.info(f"[clear_scores] by={who}")
        return jsonify({'success': True})

    if action == 'reset_game':
        reset_game(game)
        current_app.logger.info(f"[reset] game={game.slug} by={who}")
        notify_squares_update(game.slug, 'reset_game')
        return jsonify({'success': True, 'game': game.to_dict()})

    current_app.logger.warning(f"[admin] unknown squares action {action!r} by={who}")
    raise ValidationError('Invalid action')


# --- Site settings -----------------------------------------------------------

@admin.route('/settings', methods=['GET'])
@admin_required
def get_settings():
    return jsonify(get_site_settings().to_dict())


@admin.route('/settings', methods=['POST'])
@admin_required
def update_settings():
    """Body: {"action": "toggle", "key": ...} or {"action": "set", "key": ..., "value": ...}"""
    data = json_body()
    action = data.get('action')
    key = data.get('key')
    if key not in SETTING_KEYS:
        raise ValidationError(f'Unknown setting: {key}')
    if action == 'toggle':
        toggle_setting(key)
    elif action == 'set':
        set_setting(key, data.get('value'))
    else:
        raise ValidationError('Invalid action')
    settings = get_site_settings()
    current_app.logger.info(f"[settings] {key}={getattr(settings, key)} by={current_user.email}")
    return jsonify({'success': True, 'settings': settings.to_dict()})


# --- Proxy entries and votes -------------------------------------------------

@admin.route('/proxies', methods=['GET'])
@admin_required
def get_proxies():
    return jsonify([p.to_dict() for p in list_proxies()])


@admin.route('/proxies', methods=['POST'])
@admin_required
def add_proxy():
    proxy = create_proxy(json_body().get('display_name'), created_by=current_user.email)
    current_app.logger.info(f"[proxy] created id={proxy.id} name={proxy.display_name!r} by={current_user.email}")
    return jsonify({'success': True, 'proxy': proxy.to_dict()}), 201


@admin.route('/entries', methods=['POST'])
@admin_required
def add_proxy_entry():
    data = json_body()
    proxy = get_proxy(data.get('proxy_id'))
    entry = create_entry(clean_entry_fields(data), proxy=proxy)
    current_app.logger.info(f"[entry] proxy entry id={entry.id} proxy={proxy.id} by={current_user.email}")
    return jsonify(message('proxy_entry_saved', entry=entry.to_dict())), 201


@admin.route('/entries/<int:entry_id>', methods=['DELETE'])
@admin_required
def remove_proxy_entry(entry_id):
    delete_proxy_entry(entry_id)
    current_app.logger.info(f"[entry] proxy entry id={entry_id} deleted by={current_user.email}")
    return jsonify(message('proxy_entry_deleted'))


@admin.route('/votes', methods=['GET'])
@admin_required
def list_votes():
    return jsonify(get_votes_with_entries())


@admin.route('/votes', methods=['POST'])
@admin_required
def add_proxy_vote():
    data = json_body()
    proxy = get_proxy(data.get('proxy_id'))
    vote = upsert_vote(parse_ballot(data), proxy=proxy)
    current_app.logger.info(f"[vote] proxy vote proxy={proxy.id} by={current_user.email}")
    return jsonify(message('proxy_vote_saved', vote=vote.to_dict()))
