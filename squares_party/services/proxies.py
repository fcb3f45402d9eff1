from typing import List, Optional

from squares_party import db
from squares_party.errors import NotFound, ValidationError
from squares_party.models import ProxyParticipant
from squares_party.payload import MAX_INT


def create_proxy(display_name: str, created_by: Optional[str] = None) -> ProxyParticipant:
    """New stand-in for an offline guest. Names need not be unique."""
    name = str(display_name or '').strip()
    if not name:
        raise ValidationError('Proxy name required')
    if len(name) > 255:
        raise ValidationError('Proxy name is too long')
    proxy = ProxyParticipant(display_name=name, created_by=created_by)
    db.session.add(proxy)
    db.session.commit()
    return proxy


def get_proxy(proxy_id) -> ProxyParticipant:
    if isinstance(proxy_id, bool) or not isinstance(proxy_id, int):
        raise ValidationError('Proxy id required')
    if not 0 < proxy_id <= MAX_INT:
        raise NotFound('Proxy not found')
    proxy = db.session.get(ProxyParticipant, proxy_id)
    if proxy is None:
        raise NotFound('Proxy not found')
    return proxy


def list_proxies() -> List[ProxyParticipant]:
    return ProxyParticipant.query.order_by(ProxyParticipant.display_name, ProxyParticipant.id).all()
