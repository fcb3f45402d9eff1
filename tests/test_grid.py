import pytest

from squares_party.errors import GameLocked, InvalidCoordinates, QuotaExceeded, SquareTaken
from squares_party.models import Square
from squares_party.services.squares.grid import (
    admin_release_square,
    build_grid,
    claim_square,
    count_squares,
    get_all_squares,
    release_square,
    release_squares_by_owner,
    validate_coordinates,
)
from conftest import ALICE, BOB


@pytest.mark.parametrize('row,col', [(-1, 0), (0, 10), (10, 10), ('1', 2), (1.0, 2), (True, 0), (None, 3)])
def test_validate_coordinates_rejects(row, col):
    with pytest.raises(InvalidCoordinates):
        validate_coordinates(row, col)


def test_validate_coordinates_accepts_corners():
    for row, col in ((0, 0), (9, 9), (0, 9), (9, 0)):
        validate_coordinates(row, col)


def test_claim_then_duplicate_claim_conflicts(game):
    claim_square(game, 3, 4, email=ALICE, name='Alice')
    with pytest.raises(SquareTaken) as exc:
        claim_square(game, 3, 4, email=BOB, name='Bob')
    assert exc.value.status_code == 409
    assert exc.value.payload['square']['user_email'] == ALICE
    # Exactly one occupant survives
    squares = get_all_squares(game.id)
    assert [(s.row, s.col, s.user_email) for s in squares] == [(3, 4, ALICE)]


def test_claim_at_quota_leaves_grid_unchanged(game):
    game.max_squares_per_user = 2
    claim_square(game, 0, 0, email=ALICE)
    claim_square(game, 0, 1, email=ALICE)
    with pytest.raises(QuotaExceeded) as exc:
        claim_square(game, 0, 2, email=ALICE)
    assert exc.value.status_code == 400
    assert exc.value.payload == {'user_square_count': 2, 'max_squares_per_user': 2}
    assert count_squares(game.id, email=ALICE) == 2
    assert Square.query.filter_by(game_id=game.id, row=0, col=2).first() is None


def test_claim_rejected_when_locked(game):
    game.is_locked = True
    with pytest.raises(GameLocked):
        claim_square(game, 1, 1, email=ALICE)
    assert get_all_squares(game.id) == []


def test_release_by_non_owner_fails(game):
    claim_square(game, 5, 5, email=ALICE)
    assert release_square(game.id, 5, 5, email=BOB) is False
    assert count_squares(game.id, email=ALICE) == 1


def test_release_by_owner_removes_exactly_one(game):
    claim_square(game, 5, 5, email=ALICE)
    claim_square(game, 5, 6, email=ALICE)
    assert release_square(game.id, 5, 5, email=ALICE) is True
    assert [(s.row, s.col) for s in get_all_squares(game.id)] == [(5, 6)]


def test_release_requires_an_owner(game):
    with pytest.raises(ValueError):
        release_square(game.id, 0, 0)


def test_admin_release_ignores_owner(game):
    claim_square(game, 2, 2, email=ALICE)
    assert admin_release_square(game.id, 2, 2) is True
    assert admin_release_square(game.id, 2, 2) is False


def test_proxy_quota_is_separate_from_users(game, proxy):
    game.max_squares_per_user = 1
    claim_square(game, 0, 0, email=ALICE)
    square = claim_square(game, 0, 1, proxy=proxy)
    assert square.user_email is None
    assert square.to_dict()['display_name'] == 'Grandma'
    assert square.to_dict()['is_proxy'] is True
    with pytest.raises(QuotaExceeded):
        claim_square(game, 0, 2, proxy=proxy)


def test_release_all_by_proxy(game, proxy):
    claim_square(game, 1, 1, proxy=proxy)
    claim_square(game, 1, 2, proxy=proxy)
    claim_square(game, 1, 3, email=ALICE)
    assert release_squares_by_owner(game.id, proxy_id=proxy.id) == 2
    assert [s.user_email for s in get_all_squares(game.id)] == [ALICE]


def test_build_grid_places_squares_and_skips_out_of_range():
    inside = Square(row=2, col=7, user_email=ALICE)
    outside = Square(row=12, col=0, user_email=BOB)
    grid = build_grid([inside, outside])
    assert len(grid) == 10 and all(len(r) == 10 for r in grid)
    assert grid[2][7] is inside
    assert sum(cell is not None for r in grid for cell in r) == 1
