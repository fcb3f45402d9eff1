from collections import defaultdict
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from squares_party import db
from squares_party.errors import ValidationError
from squares_party.models import Entry, ProxyParticipant, Vote
from squares_party.payload import parse_int
from .entries import get_all_entries, get_entry_by_owner

# Points for first, second and third place
PLACE_POINTS = (3, 2, 1)


def parse_ballot(data: dict) -> List[int]:
    keys = ('first_place', 'second_place', 'third_place')
    if any(data.get(key) in (None, '', 0) for key in keys):
        raise ValidationError('Please pick a first, second and third place entry.')
    ballot = [parse_int(data.get(key), key, minimum=1) for key in keys]
    if len(set(ballot)) != len(ballot):
        raise ValidationError('Each ranking must be a different entry.')
    known = {e.id for e in get_all_entries()}
    if any(entry_id not in known for entry_id in ballot):
        raise ValidationError('One of the selected entries does not exist.')
    return ballot


def check_not_own_entry(ballot: List[int], email: str) -> None:
    own = get_entry_by_owner(email=email)
    if own is not None and own.id in ballot:
        raise ValidationError('You cannot vote for your own entry.')


def get_vote(email: Optional[str] = None, proxy_id: Optional[int] = None) -> Optional[Vote]:
    if proxy_id is not None:
        return Vote.query.filter_by(proxy_id=proxy_id).first()
    return Vote.query.filter_by(voter_email=email).first()


def upsert_vote(ballot: List[int], email: Optional[str] = None, name: Optional[str] = None,
                proxy: Optional[ProxyParticipant] = None) -> Vote:
    first, second, third = ballot
    proxy_id = proxy.id if proxy is not None else None
    vote = get_vote(email, proxy_id)
    if vote is None:
        vote = Vote(
            voter_email=None if proxy is not None else email,
            voter_name=proxy.display_name if proxy is not None else name,
            proxy_id=proxy_id,
            first_place_entry_id=first,
            second_place_entry_id=second,
            third_place_entry_id=third,
        )
        db.session.add(vote)
        try:
            db.session.commit()
            return vote
        except IntegrityError:
            db.session.rollback()
            vote = get_vote(email, proxy_id)
            if vote is None:
                raise
    vote.first_place_entry_id = first
    vote.second_place_entry_id = second
    vote.third_place_entry_id = third
    db.session.commit()
    return vote


def calculate_vote_results() -> List[dict]:
    """Entries with their 3/2/1 point totals, highest first."""
    points = defaultdict(int)
    for vote in Vote.query.all():
        for entry_id, value in zip(vote.ranked_entry_ids, PLACE_POINTS):
            points[entry_id] += value
    results = [{'entry': e, 'score': points[e.id]} for e in get_all_entries()]
    results.sort(key=lambda r: r['score'], reverse=True)
    return results


def get_winner() -> Optional[dict]:
    results = calculate_vote_results()
    if not results or results[0]['score'] == 0:
        return None
    return results[0]


def get_votes_with_entries() -> List[dict]:
    entries = {e.id: e for e in Entry.query.all()}
    rows = []
    for vote in Vote.query.order_by(Vote.created_at, Vote.id).all():
        first, second, third = (entries.get(i) for i in vote.ranked_entry_ids)
        rows.append({
            'vote': vote.to_dict(),
            'first_place': first.to_dict() if first else None,
            'second_place': second.to_dict() if second else None,
            'third_place': third.to_dict() if third else None,
        })
    return rows
