from flask import Blueprint, current_app, jsonify
from flask_login import current_user, login_required

from squares_party.auth import approved_required
from squares_party.errors import NotApproved
from squares_party.messages import message
from squares_party.payload import json_body
from squares_party.services.games import get_user_games
from squares_party.services.party.profile import update_display_name

main = Blueprint('main', __name__)


@main.route('/me')
@login_required
def me():
    """Who the auth proxy says is signed in, and whether they are on the guest list."""
    return jsonify({'success': True, 'user': current_user.to_dict()})


@main.route('/profile', methods=['POST'])
@approved_required
def update_profile():
    data = json_body()
    user = update_display_name(current_user.email, data.get('name'))
    if user is None:
        raise NotApproved()
    current_user.refresh()
    current_app.logger.info(f"[profile] {current_user.email} renamed to {user.name!r}")
    return jsonify(message('profile_updated', user=current_user.to_dict()))


@main.route('/games')
@approved_required
def list_games():
    return jsonify(get_user_games(current_user))
