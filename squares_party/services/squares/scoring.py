from typing import List, Optional

from squares_party import db
from squares_party.errors import AxisNumbersCorrupt, ValidationError
from squares_party.models import Game, QuarterScore
from .axis import get_axis_numbers, is_permutation
from .grid import get_all_squares

QUARTERS = (1, 2, 3, 4)

STATUS_UNDETERMINED = 'undetermined'
STATUS_AWAITING_NUMBERS = 'awaiting_numbers'
STATUS_UNCLAIMED = 'unclaimed'
STATUS_WON = 'won'


def get_scores() -> List[QuarterScore]:
    return QuarterScore.query.order_by(QuarterScore.quarter).all()


def set_score(quarter: int, home_score: Optional[int], away_score: Optional[int]) -> QuarterScore:
    """Create or overwrite the score for a quarter. ``None`` clears a side."""
    if quarter not in QUARTERS:
        raise ValidationError('Quarter must be between 1 and 4')
    for value in (home_score, away_score):
        if value is not None and value < 0:
            raise ValidationError('Scores cannot be negative')
    score = QuarterScore.query.filter_by(quarter=quarter).first()
    if score is None:
        score = QuarterScore(quarter=quarter)
        db.session.add(score)
    score.home_score = home_score
    score.away_score = away_score
    db.session.commit()
    return score


def clear_all_scores(commit: bool = True) -> int:
    deleted = QuarterScore.query.delete(synchronize_session=False)
    if commit:
        db.session.commit()
    return deleted


def calculate_winners(game: Game) -> List[dict]:
    """Winner of each quarter for a game.

    The home score's last digit is looked up on the column axis and the away
    score's on the row axis; the occupant of that cell wins. Raises
    ``AxisNumbersCorrupt`` when stored axis numbers exist but do not form a
    permutation of 0-9 on both axes.
    """
    scores = {s.quarter: s for s in get_scores()}
    axis = get_axis_numbers(game.id)
    rows, cols = axis['rows'], axis['cols']
    generated = any(v is not None for v in rows + cols)
    if generated and not (is_permutation(rows) and is_permutation(cols)):
        raise AxisNumbersCorrupt(game=game.slug, rows=rows, cols=cols)
    claimed = {(s.row, s.col): s for s in get_all_squares(game.id)}

    results = []
    for quarter in QUARTERS:
        result = {
            'quarter': quarter,
            'home_score': None,
            'away_score': None,
            'home_last_digit': None,
            'away_last_digit': None,
            'winning_row': None,
            'winning_col': None,
            'winning_square': None,
            'status': STATUS_UNDETERMINED,
        }
        score = scores.get(quarter)
        if score is None or score.home_score is None or score.away_score is None:
            results.append(result)
            continue

        result.update({
            'home_score': score.home_score,
            'away_score': score.away_score,
            'home_last_digit': score.home_score % 10,
            'away_last_digit': score.away_score % 10,
        })
        if not generated:
            result['status'] = STATUS_AWAITING_NUMBERS
            results.append(result)
            continue

        winning_col = cols.index(result['home_last_digit'])
        winning_row = rows.index(result['away_last_digit'])
        square = claimed.get((winning_row, winning_col))
        result.update({
            'winning_row': winning_row,
            'winning_col': winning_col,
            'winning_square': square.to_dict() if square else None,
            'status': STATUS_WON if square else STATUS_UNCLAIMED,
        })
        results.append(result)
    return results


def calculate_prediction_results(predictions, actual_home: Optional[int], actual_away: Optional[int]) -> List[dict]:
    """Rank predictions by combined score difference, lowest first.

    Equal diffs keep their incoming (creation) order. Every prediction that
    shares the lowest diff is a winner. Without a final score nothing is
    ranked and ``diff`` is ``None``.
    """
    if actual_home is None or actual_away is None:
        return [{'prediction': p, 'diff': None, 'is_winner': False} for p in predictions]

    results = [
        {
            'prediction': p,
            'diff': abs(p.home_score - actual_home) + abs(p.away_score - actual_away),
            'is_winner': False,
        }
        for p in predictions
    ]
    results.sort(key=lambda r: r['diff'])
    if results:
        best = results[0]['diff']
        for r in results:
            r['is_winner'] = r['diff'] == best
    return results
