from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from squares_party import db
from squares_party.errors import GameLocked, InvalidCoordinates, QuotaExceeded, SquareTaken
from squares_party.models import Game, GRID_SIZE, ProxyParticipant, Square, utcnow


def validate_coordinates(row, col) -> None:
    # bool is an int subclass; JSON true/false are not coordinates
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in (row, col)):
        raise InvalidCoordinates()
    if not (0 <= row < GRID_SIZE and 0 <= col < GRID_SIZE):
        raise InvalidCoordinates('Coordinates out of range')


def _owned_by(query, email: Optional[str] = None, proxy_id: Optional[int] = None):
    if email is None and proxy_id is None:
        raise ValueError("a square owner needs an email or a proxy id")
    if proxy_id is not None:
        return query.filter(Square.proxy_id == proxy_id)
    return query.filter(Square.user_email == email)


def get_all_squares(game_id: int) -> List[Square]:
    return Square.query.filter_by(game_id=game_id).order_by(Square.row, Square.col).all()


def get_square(game_id: int, row: int, col: int) -> Optional[Square]:
    return Square.query.filter_by(game_id=game_id, row=row, col=col).first()


def get_squares_by_owner(game_id: int, email: Optional[str] = None, proxy_id: Optional[int] = None) -> List[Square]:
    return _owned_by(Square.query.filter_by(game_id=game_id), email, proxy_id).all()


def count_squares(game_id: int, email: Optional[str] = None, proxy_id: Optional[int] = None) -> int:
    return _owned_by(Square.query.filter_by(game_id=game_id), email, proxy_id).count()


def build_grid(squares) -> List[List[Optional[Square]]]:
    """Project claimed squares onto a 10x10 grid, ``None`` where unclaimed."""
    grid: List[List[Optional[Square]]] = [[None] * GRID_SIZE for _ in range(GRID_SIZE)]
    for square in squares:
        if 0 <= square.row < GRID_SIZE and 0 <= square.col < GRID_SIZE:
            grid[square.row][square.col] = square
    return grid


def serialize_grid(grid) -> List[List[Optional[dict]]]:
    return [[cell.to_dict() if cell is not None else None for cell in row] for row in grid]


def claim_square(game: Game, row: int, col: int, email: Optional[str] = None, name: Optional[str] = None,
                 image: Optional[str] = None, proxy: Optional[ProxyParticipant] = None) -> Square:
    """Claim a cell for a signed-in user (``email``) or a proxy participant.

    The insert is attempted directly; the unique index on (game, row, col)
    decides races and a violation is reported as ``SquareTaken``.
    """
    validate_coordinates(row, col)
    if game.is_locked:
        raise GameLocked()

    proxy_id = proxy.id if proxy is not None else None
    owned = count_squares(game.id, email, proxy_id)
    if owned >= game.max_squares_per_user:
        raise QuotaExceeded(
            user_square_count=owned,
            max_squares_per_user=game.max_squares_per_user,
        )

    square = Square(
        game_id=game.id,
        row=row,
        col=col,
        user_email=None if proxy is not None else email,
        user_name=None if proxy is not None else name,
        user_image=None if proxy is not None else image,
        proxy_id=proxy_id,
        claimed_at=utcnow(),
    )
    db.session.add(square)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        occupant = get_square(game.id, row, col)
        current_app.logger.info(f"[claim-conflict] game={game.slug} ({row},{col})")
        raise SquareTaken(square=occupant.to_dict() if occupant else None)
    return square


def release_square(game_id: int, row: int, col: int, email: Optional[str] = None,
                   proxy_id: Optional[int] = None) -> bool:
    """Delete the cell only if the given owner holds it. True if a row went."""
    query = _owned_by(Square.query.filter_by(game_id=game_id, row=row, col=col), email, proxy_id)
    deleted = query.delete(synchronize_session=False)
    db.session.commit()
    return deleted > 0


def admin_release_square(game_id: int, row: int, col: int) -> bool:
    deleted = Square.query.filter_by(game_id=game_id, row=row, col=col).delete(synchronize_session=False)
    db.session.commit()
    return deleted > 0


def release_squares_by_owner(game_id: int, email: Optional[str] = None, proxy_id: Optional[int] = None) -> int:
    deleted = _owned_by(Square.query.filter_by(game_id=game_id), email, proxy_id).delete(synchronize_session=False)
    db.session.commit()
    return deleted


def clear_all_squares(game_id: int, commit: bool = True) -> int:
    deleted = Square.query.filter_by(game_id=game_id).delete(synchronize_session=False)
    if commit:
        db.session.commit()
    return deleted
