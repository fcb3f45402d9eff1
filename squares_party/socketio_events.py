from flask_socketio import join_room, leave_room, emit
from squares_party import socketio


NAMESPACE = '/ws'


def game_room(slug: str) -> str:
    return f"game:{str(slug).strip().lower()}"


def notify_squares_update(slug: str, reason: str) -> None:
    """Tell clients watching a game to re-poll. Polling stays the source of truth."""
    socketio.emit('squares_update', {'slug': slug, 'reason': reason}, to=game_room(slug), namespace=NAMESPACE)


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def _slug(data):
    return data.get('slug') if isinstance(data, dict) else None


def handle_join_game(data):
    slug = _slug(data)
    if not slug:
        emit('error', {'message': 'slug is required'})
        return
    room = game_room(slug)
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_game(data):
    slug = _slug(data)
    if not slug:
        emit('error', {'message': 'slug is required'})
        return
    room = game_room(slug)
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = [NAMESPACE, '/'] if testing else [NAMESPACE]
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_game', handle_join_game, namespace=namespace)
        socketio.on_event('leave_game', handle_leave_game, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
