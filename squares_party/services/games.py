from typing import List, Optional

from flask import current_app

from squares_party import db
from squares_party.errors import NoGameAccess, NotFound, ValidationError
from squares_party.models import Game, GameAccess, ROLE_ADMIN, ROLE_PLAYER
from squares_party.services.squares.axis import replace_axis_numbers
from squares_party.services.squares.grid import clear_all_squares
from squares_party.services.squares.predictions import clear_all_predictions
from squares_party.services.squares.scoring import clear_all_scores


# Sub-routes of /api/squares that would shadow a game slug
RESERVED_SLUGS = ('results', 'prediction')


def create_game(slug: str, name: str, max_squares_per_user: int = 5) -> Game:
    slug = (slug or '').strip().lower()
    if not slug or slug in RESERVED_SLUGS or '/' in slug:
        raise ValidationError(f'Invalid game slug: {slug!r}')
    game = Game(slug=slug, name=name, max_squares_per_user=max_squares_per_user)
    db.session.add(game)
    db.session.commit()
    return game


def get_game_by_slug(slug: str) -> Optional[Game]:
    # Slugs are stored lowercased by create_game
    return Game.query.filter_by(slug=(slug or '').strip().lower()).first()


def get_user_game_access(email: str, game_id: int) -> Optional[GameAccess]:
    return GameAccess.query.filter_by(game_id=game_id, user_email=email).first()


def get_user_games(user) -> List[dict]:
    """Games the user can open, with their role in each."""
    default_slug = current_app.config.get('DEFAULT_GAME_SLUG')
    roles = {a.game_id: a.role for a in GameAccess.query.filter_by(user_email=user.email).all()}
    games = []
    for game in Game.query.order_by(Game.id).all():
        role = roles.get(game.id)
        if user.is_admin:
            role = ROLE_ADMIN
        elif role is None and game.slug == default_slug:
            role = ROLE_PLAYER
        if role is None:
            continue
        data = game.to_dict()
        data['role'] = role
        games.append(data)
    return games


def can_access_game(user, game: Game) -> bool:
    # The default game is open to the whole guest list
    if user.is_admin or game.slug == current_app.config.get('DEFAULT_GAME_SLUG'):
        return True
    return get_user_game_access(user.email, game.id) is not None


def is_game_admin(user, game: Game) -> bool:
    if user.is_admin:
        return True
    access = get_user_game_access(user.email, game.id)
    return access is not None and access.role == ROLE_ADMIN


def resolve_game(slug: Optional[str] = None) -> Game:
    game = get_game_by_slug(slug or current_app.config['DEFAULT_GAME_SLUG'])
    if game is None:
        raise NotFound('Game not found')
    return game


def require_game_access(user, slug: Optional[str] = None) -> Game:
    game = resolve_game(slug)
    if not can_access_game(user, game):
        current_app.logger.warning(f"[access] {user.email} has no access to game={game.slug}")
        raise NoGameAccess()
    return game


def require_game_admin(user, slug: Optional[str] = None) -> Game:
    game = resolve_game(slug)
    if not is_game_admin(user, game):
        current_app.logger.warning(f"[access] non-admin {user.email} tried admin of game={game.slug}")
        raise NotFound()
    return game


def set_game_locked(game: Game, locked: bool, rng=None) -> bool:
    """Lock or unlock a game.

    Going from unlocked to locked draws new axis numbers in the same commit.
    Unlocking keeps the old numbers; the next lock replaces them. Returns
    True when the state changed.
    """
    if game.is_locked == locked:
        return False
    if locked:
        replace_axis_numbers(game.id, rng)
    game.is_locked = locked
    db.session.add(game)
    db.session.commit()
    return True


def toggle_game_locked(game: Game) -> bool:
    set_game_locked(game, not game.is_locked)
    return game.is_locked


def set_game_max_squares(game: Game, max_squares: int) -> None:
    limit = int(current_app.config.get('MAX_SQUARES_LIMIT', 100))
    if isinstance(max_squares, bool) or not isinstance(max_squares, int) or not 0 < max_squares <= limit:
        raise ValidationError(f'Max squares must be between 1 and {limit}')
    game.max_squares_per_user = max_squares
    db.session.add(game)
    db.session.commit()


def set_final_score(game: Game, home_score: Optional[int], away_score: Optional[int]) -> None:
    for value in (home_score, away_score):
        if value is not None and value < 0:
            raise ValidationError('Scores cannot be negative')
    game.final_home_score = home_score
    game.final_away_score = away_score
    db.session.add(game)
    db.session.commit()


def reset_game(game: Game) -> None:
    """Clear squares, predictions and final score, wipe the shared quarter
    scores, and unlock. Axis numbers stay until the next lock."""
    clear_all_squares(game.id, commit=False)
    clear_all_predictions(game.id, commit=False)
    clear_all_scores(commit=False)
    game.final_home_score = None
    game.final_away_score = None
    game.is_locked = False
    db.session.add(game)
    db.session.commit()
