import random
from typing import Dict, List, Optional

from squares_party import db
from squares_party.models import AxisNumber, GRID_SIZE, utcnow

DIGITS = list(range(GRID_SIZE))


def shuffled_digits(rng: Optional[random.Random] = None) -> List[int]:
    """Uniform random permutation of 0-9 (Fisher-Yates via ``random.shuffle``).

    Draws from the general-purpose PRNG, not a cryptographic source.
    """
    digits = list(DIGITS)
    (rng or random).shuffle(digits)
    return digits


def is_permutation(values) -> bool:
    values = list(values)
    return None not in values and sorted(values) == DIGITS


def get_axis_numbers(game_id: int) -> Dict[str, List[Optional[int]]]:
    """Axis values by position. Positions never generated are ``None``."""
    rows: List[Optional[int]] = [None] * GRID_SIZE
    cols: List[Optional[int]] = [None] * GRID_SIZE
    for n in AxisNumber.query.filter_by(game_id=game_id).all():
        if not 0 <= n.position < GRID_SIZE:
            continue
        if n.axis == 'row':
            rows[n.position] = n.value
        elif n.axis == 'col':
            cols[n.position] = n.value
    return {'rows': rows, 'cols': cols}


def replace_axis_numbers(game_id: int, rng: Optional[random.Random] = None) -> Dict[str, List[int]]:
    """Swap in fresh row and column permutations for a game.

    Stages the delete and the 20 inserts on the session; the caller commits
    so the lock flag and the numbers land together.
    """
    rows = shuffled_digits(rng)
    cols = shuffled_digits(rng)
    AxisNumber.query.filter_by(game_id=game_id).delete(synchronize_session=False)
    now = utcnow()
    db.session.add_all(
        [AxisNumber(game_id=game_id, axis='row', position=p, value=v, generated_at=now) for p, v in enumerate(rows)]
        + [AxisNumber(game_id=game_id, axis='col', position=p, value=v, generated_at=now) for p, v in enumerate(cols)]
    )
    return {'rows': rows, 'cols': cols}
