from typing import Optional

from squares_party import db
from squares_party.errors import ValidationError
from squares_party.models import SiteSettings

REVEAL_ENTRIES = 'reveal_entries'
VOTING_ACTIVE = 'voting_active'
VOTING_LOCKED = 'voting_locked'
REVEAL_RESULTS = 'reveal_results'
SETTING_KEYS = (REVEAL_ENTRIES, VOTING_ACTIVE, VOTING_LOCKED, REVEAL_RESULTS)

_TRUE = {'true', '1', 'yes', 'on'}
_FALSE = {'false', '0', 'no', 'off'}


def get_site_settings() -> SiteSettings:
    """The single settings row, created with defaults on first use."""
    settings = SiteSettings.query.order_by(SiteSettings.id).first()
    if settings is None:
        settings = SiteSettings()
        db.session.add(settings)
        db.session.commit()
    return settings


def update_site_settings(**flags) -> SiteSettings:
    """Set several flags in one commit."""
    unknown = set(flags) - set(SETTING_KEYS)
    if unknown:
        raise ValidationError(f"Unknown setting: {', '.join(sorted(unknown))}")
    settings = get_site_settings()
    for key, value in flags.items():
        setattr(settings, key, bool(value))
    db.session.commit()
    return settings


def toggle_setting(key: str) -> bool:
    settings = get_site_settings()
    if key not in SETTING_KEYS:
        raise ValidationError(f'Unknown setting: {key}')
    value = not getattr(settings, key)
    update_site_settings(**{key: value})
    return value


def get_setting(key: str) -> Optional[str]:
    """String view of a flag (``'true'``/``'false'``); ``None`` for unknown keys."""
    if key not in SETTING_KEYS:
        return None
    return 'true' if getattr(get_site_settings(), key) else 'false'


def set_setting(key: str, value) -> None:
    if key not in SETTING_KEYS:
        raise ValidationError(f'Unknown setting: {key}')
    if isinstance(value, bool):
        flag = value
    elif str(value).strip().lower() in _TRUE:
        flag = True
    elif str(value).strip().lower() in _FALSE:
        flag = False
    else:
        raise ValidationError(f'Invalid value for {key}')
    update_site_settings(**{key: flag})
