import os
import sys
import pytest

# Ensure the project root (containing the `squares_party` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from config import Config
from squares_party import create_app, db, socketio


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    DEFAULT_GAME_SLUG = 'main'
    DEFAULT_GAME_NAME = 'Test Squares'
    DEFAULT_MAX_SQUARES_PER_USER = 5
    CORS_ORIGINS = []


ALICE = 'alice@example.com'
BOB = 'bob@example.com'
ADMIN = 'admin@example.com'
STRANGER = 'stranger@example.com'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)

    # Test requests reuse the app context pushed below, so drop Flask-Login's
    # per-context user cache after each request to keep identities separate.
    @application.teardown_request
    def _forget_login_user(exc):
        from flask import g
        g.pop('_login_user', None)

    with application.app_context():
        # Ensure models are imported so tables are created
        import squares_party.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


@pytest.fixture()
def game(flask_app):
    from squares_party.services.games import create_game
    return create_game('main', 'Test Squares', 5)


@pytest.fixture()
def guests(flask_app):
    """Alice and Bob on the guest list, plus one site admin."""
    from squares_party.models import ApprovedUser
    db.session.add_all([
        ApprovedUser(email=ALICE, name='Alice'),
        ApprovedUser(email=BOB, name='Bob'),
        ApprovedUser(email=ADMIN, name='Admin', is_admin=True),
    ])
    db.session.commit()


@pytest.fixture()
def headers_for():
    def _headers(email, name=None):
        headers = {'X-Auth-User-Email': email, 'X-Auth-User-Id': f'id-{email}'}
        if name:
            headers['X-Auth-User-Name'] = name
        return headers
    return _headers


@pytest.fixture()
def alice(headers_for):
    return headers_for(ALICE)


@pytest.fixture()
def bob(headers_for):
    return headers_for(BOB)


@pytest.fixture()
def admin(headers_for):
    return headers_for(ADMIN)


@pytest.fixture()
def proxy(flask_app):
    from squares_party.services.proxies import create_proxy
    return create_proxy('Grandma', created_by=ADMIN)
