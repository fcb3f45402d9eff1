from typing import Optional

from squares_party import db
from squares_party.errors import ValidationError
from squares_party.models import ApprovedUser
from .entries import rename_owner_entries


def get_user_profile(email: str) -> Optional[ApprovedUser]:
    return ApprovedUser.query.filter_by(email=email).first()


def update_display_name(email: str, name) -> Optional[ApprovedUser]:
    """Rename a guest and carry the new name onto their entry."""
    name = str(name or '').strip()
    if not name:
        raise ValidationError('Display name is required')
    if len(name) > 255:
        raise ValidationError('Display name is too long')
    user = get_user_profile(email)
    if user is None:
        return None
    user.name = name
    rename_owner_entries(email, name)
    db.session.commit()
    return user
