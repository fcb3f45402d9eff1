import logging

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(getattr(logging, str(flask_app.config.get('LOG_LEVEL', 'INFO')), logging.INFO))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    db.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Socket.IO only pushes refresh hints; polling stays authoritative
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from squares_party.errors import register_error_handlers
    register_error_handlers(flask_app)

    # Identity comes from the auth proxy headers, see squares_party.auth
    from squares_party import auth  # noqa: F401

    from squares_party.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from squares_party.api.squares import squares
    flask_app.register_blueprint(squares, url_prefix='/api/squares')

    from squares_party.api.admin import admin
    flask_app.register_blueprint(admin, url_prefix='/api/admin')

    from squares_party.api.entries import entries
    flask_app.register_blueprint(entries, url_prefix='/api')

    from squares_party.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @flask_app.route('/health')
    def health():
        return jsonify({'status': 'ok'})

    register_cli(flask_app)

    return flask_app


def register_cli(flask_app):
    from squares_party.models import ApprovedUser, GameAccess, ROLE_ADMIN, ROLE_PLAYER
    from squares_party.services.games import create_game, get_game_by_slug

    @flask_app.cli.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database with the default game."""
        db.drop_all()
        db.create_all()
        create_game(
            flask_app.config['DEFAULT_GAME_SLUG'],
            flask_app.config['DEFAULT_GAME_NAME'],
            flask_app.config['DEFAULT_MAX_SQUARES_PER_USER'],
        )
        print('Database has been reset and seeded!')

    @flask_app.cli.command('approve-user')
    @click.argument('email')
    @click.option('--name', default=None, help='Display name.')
    @click.option('--admin', 'is_admin', is_flag=True, help='Grant site admin.')
    def approve_user_command(email, name, is_admin):
        """Adds EMAIL to the guest list."""
        email = email.strip().lower()
        user = ApprovedUser.query.filter_by(email=email).first()
        if user is None:
            user = ApprovedUser(email=email, added_by='cli')
            db.session.add(user)
        if name:
            user.name = name
        user.is_admin = user.is_admin or is_admin
        db.session.commit()
        print(f'Approved {email}' + (' (admin)' if user.is_admin else ''))

    @flask_app.cli.command('create-game')
    @click.argument('slug')
    @click.argument('name')
    @click.option('--max-squares', default=None, type=int)
    def create_game_command(slug, name, max_squares):
        """Creates a Squares game reachable at /api/squares/SLUG."""
        game = create_game(slug, name, max_squares or flask_app.config['DEFAULT_MAX_SQUARES_PER_USER'])
        print(f'Created game {game.slug} (id={game.id})')

    @flask_app.cli.command('grant-access')
    @click.argument('slug')
    @click.argument('email')
    @click.option('--role', type=click.Choice([ROLE_PLAYER, ROLE_ADMIN]), default=ROLE_PLAYER)
    def grant_access_command(slug, email, role):
        """Gives EMAIL access to the game SLUG."""
        game = get_game_by_slug(slug)
        if game is None:
            raise click.ClickException(f'Game {slug} not found')
        email = email.strip().lower()
        access = GameAccess.query.filter_by(game_id=game.id, user_email=email).first()
        if access is None:
            access = GameAccess(game_id=game.id, user_email=email, added_by='cli')
            db.session.add(access)
        access.role = role
        db.session.commit()
        print(f'{email} is now {role} of {slug}')
