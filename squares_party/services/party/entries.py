from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from squares_party import db
from squares_party.errors import Conflict, NotFound, ValidationError
from squares_party.models import Entry, ProxyParticipant


def clean_entry_fields(data: dict) -> dict:
    """Trimmed entry fields from a request body; title and description required."""
    title = str(data.get('title') or '').strip()
    description = str(data.get('description') or '').strip()
    notes = str(data.get('notes') or '').strip() or None
    needs_power = data.get('needs_power', data.get('needsPower', False))
    if isinstance(needs_power, str):
        needs_power = needs_power.lower() in ('on', 'true', '1', 'yes')
    if not title or not description:
        raise ValidationError('Title and description are required')
    if len(title) > 255:
        raise ValidationError('Title is too long')
    return {
        'title': title,
        'description': description,
        'notes': notes,
        'needs_power': bool(needs_power),
    }


def get_all_entries() -> List[Entry]:
    return Entry.query.order_by(Entry.created_at, Entry.id).all()


def get_entry_by_owner(email: Optional[str] = None, proxy_id: Optional[int] = None) -> Optional[Entry]:
    if proxy_id is not None:
        return Entry.query.filter_by(proxy_id=proxy_id).first()
    return Entry.query.filter_by(user_email=email).first()


def create_entry(fields: dict, email: Optional[str] = None, name: Optional[str] = None,
                 proxy: Optional[ProxyParticipant] = None) -> Entry:
    entry = Entry(
        user_email=None if proxy is not None else email,
        user_name=None if proxy is not None else name,
        proxy_id=proxy.id if proxy is not None else None,
        **fields,
    )
    db.session.add(entry)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        if proxy is not None:
            raise Conflict('This guest already has an entry.')
        raise Conflict('You already have an entry.')
    return entry


def update_entry(entry_id: int, email: str, fields: dict) -> Optional[Entry]:
    """Update an entry the user owns. ``None`` if missing or not theirs."""
    entry = Entry.query.filter_by(id=entry_id, user_email=email).first()
    if entry is None:
        return None
    for key, value in fields.items():
        setattr(entry, key, value)
    db.session.commit()
    return entry


def delete_entry(entry_id: int, email: str) -> bool:
    deleted = Entry.query.filter_by(id=entry_id, user_email=email).delete(synchronize_session=False)
    db.session.commit()
    return deleted > 0


def delete_proxy_entry(entry_id: int) -> None:
    entry = db.session.get(Entry, entry_id)
    if entry is None:
        raise NotFound('Entry not found')
    if entry.proxy_id is None:
        raise ValidationError('Only proxy entries can be deleted here')
    db.session.delete(entry)
    db.session.commit()


def rename_owner_entries(email: str, name: str) -> None:
    Entry.query.filter_by(user_email=email).update({'user_name': name}, synchronize_session=False)


def serialize_entries(entries, viewer, reveal: bool) -> List[dict]:
    """Entry dicts as ``viewer`` may see them.

    Title and description are hidden from other guests until entries are
    revealed; owners and admins always see them.
    """
    return [
        e.to_dict(include_details=reveal or viewer.is_admin or e.user_email == viewer.email)
        for e in entries
    ]
