from flask import Blueprint, current_app, jsonify
from flask_login import current_user

from squares_party.auth import approved_required
from squares_party.errors import NotFound, PartyError
from squares_party.messages import MESSAGES, message
from squares_party.payload import json_body, parse_int
from squares_party.services.party.entries import (
    clean_entry_fields,
    create_entry,
    delete_entry,
    get_all_entries,
    get_entry_by_owner,
    serialize_entries,
    update_entry,
)
from squares_party.services.party.votes import (
    calculate_vote_results,
    check_not_own_entry,
    get_vote,
    get_winner,
    parse_ballot,
    upsert_vote,
)
from squares_party.services.settings import get_site_settings


entries = Blueprint('entries', __name__)


def _entry_id(data) -> int:
    return parse_int(data.get('id'), 'id', minimum=1)


@entries.route('/entries', methods=['GET'])
@approved_required
def list_entries():
    settings = get_site_settings()
    own = get_entry_by_owner(email=current_user.email)
    return jsonify({
        'entries': serialize_entries(get_all_entries(), current_user, settings.reveal_entries),
        'my_entry': own.to_dict() if own else None,
        'reveal_entries': settings.reveal_entries,
    })


@entries.route('/entries', methods=['POST'])
@approved_required
def add_entry():
    fields = clean_entry_fields(json_body())
    entry = create_entry(fields, email=current_user.email, name=current_user.display_name)
    current_app.logger.info(f"[entry] created id={entry.id} by={current_user.email}")
    return jsonify(message('entry_created', entry=entry.to_dict())), 201


@entries.route('/entries', methods=['PUT'])
@approved_required
def edit_entry():
    data = json_body()
    entry_id = _entry_id(data)
    entry = update_entry(entry_id, current_user.email, clean_entry_fields(data))
    if entry is None:
        current_app.logger.warning(f"[entry] update of id={entry_id} refused for {current_user.email}")
        raise NotFound('Entry not found')
    current_app.logger.info(f"[entry] updated id={entry.id} by={current_user.email}")
    return jsonify(message('entry_updated', entry=entry.to_dict()))


@entries.route('/entries', methods=['DELETE'])
@approved_required
def remove_entry():
    entry_id = _entry_id(json_body())
    if not delete_entry(entry_id, current_user.email):
        current_app.logger.warning(f"[entry] delete of id={entry_id} refused for {current_user.email}")
        raise NotFound('Entry not found')
    current_app.logger.info(f"[entry] deleted id={entry_id} by={current_user.email}")
    return jsonify(message('entry_deleted'))


@entries.route('/votes', methods=['GET'])
@approved_required
def my_vote():
    settings = get_site_settings()
    vote = get_vote(email=current_user.email)
    return jsonify({
        'vote': vote.to_dict() if vote else None,
        'voting_active': settings.voting_active,
        'voting_locked': settings.voting_locked,
    })


@entries.route('/votes', methods=['POST'])
@approved_required
def cast_vote():
    settings = get_site_settings()
    if not settings.voting_active:
        raise PartyError(MESSAGES['voting_inactive'][1], status_code=423)
    if settings.voting_locked:
        raise PartyError(MESSAGES['voting_locked'][1], status_code=423)
    ballot = parse_ballot(json_body())
    check_not_own_entry(ballot, current_user.email)
    vote = upsert_vote(ballot, email=current_user.email, name=current_user.display_name)
    current_app.logger.info(f"[vote] saved by={current_user.email} ballot={ballot}")
    return jsonify(message('vote_saved', vote=vote.to_dict()))


@entries.route('/votes/results', methods=['GET'])
@approved_required
def vote_results():
    if not get_site_settings().reveal_results and not current_user.is_admin:
        raise PartyError('Results are not revealed yet', status_code=403)
    winner = get_winner()
    return jsonify({
        'results': [{'entry': r['entry'].to_dict(), 'score': r['score']} for r in calculate_vote_results()],
        'winner': {'entry': winner['entry'].to_dict(), 'score': winner['score']} if winner else None,
    })
