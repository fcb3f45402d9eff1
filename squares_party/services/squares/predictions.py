from typing import List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from squares_party import db
from squares_party.errors import ValidationError
from squares_party.models import Game, ProxyParticipant, ScorePrediction
from squares_party.payload import parse_int


def parse_score(value, field: str) -> int:
    """Non-negative whole-number score, capped at MAX_SCORE."""
    if value is None or value == '':
        raise ValidationError(f'{field} is required')
    return parse_int(value, field, maximum=current_app.config.get('MAX_SCORE', 999))


def get_all_predictions(game_id: int) -> List[ScorePrediction]:
    return (ScorePrediction.query
            .filter_by(game_id=game_id)
            .order_by(ScorePrediction.created_at, ScorePrediction.id)
            .all())


def get_prediction(game_id: int, email: Optional[str] = None, proxy_id: Optional[int] = None) -> Optional[ScorePrediction]:
    query = ScorePrediction.query.filter_by(game_id=game_id)
    if proxy_id is not None:
        return query.filter_by(proxy_id=proxy_id).first()
    return query.filter_by(user_email=email).first()


def upsert_prediction(game: Game, home_score: int, away_score: int, email: Optional[str] = None,
                      name: Optional[str] = None, proxy: Optional[ProxyParticipant] = None,
                      created_by: Optional[str] = None) -> ScorePrediction:
    """Create or update the owner's prediction for a game."""
    proxy_id = proxy.id if proxy is not None else None
    prediction = get_prediction(game.id, email, proxy_id)
    if prediction is None:
        prediction = ScorePrediction(
            game_id=game.id,
            user_email=None if proxy is not None else email,
            user_name=None if proxy is not None else name,
            proxy_id=proxy_id,
            is_proxy=proxy is not None,
            created_by=created_by,
            home_score=home_score,
            away_score=away_score,
        )
        db.session.add(prediction)
        try:
            db.session.commit()
            return prediction
        except IntegrityError:
            # Lost an insert race with the same owner; fall through to update
            db.session.rollback()
            prediction = get_prediction(game.id, email, proxy_id)
            if prediction is None:
                raise
    prediction.home_score = home_score
    prediction.away_score = away_score
    if proxy is None and name:
        prediction.user_name = name
    db.session.commit()
    return prediction


def delete_prediction(game_id: int, prediction_id: int) -> bool:
    deleted = ScorePrediction.query.filter_by(game_id=game_id, id=prediction_id).delete(synchronize_session=False)
    db.session.commit()
    return deleted > 0


def clear_all_predictions(game_id: int, commit: bool = True) -> int:
    deleted = ScorePrediction.query.filter_by(game_id=game_id).delete(synchronize_session=False)
    if commit:
        db.session.commit()
    return deleted
