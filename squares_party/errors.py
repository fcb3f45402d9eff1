from flask import current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError


class PartyError(Exception):
    """Base for errors surfaced to the client as ``{"error": message}``."""
    status_code = 400
    message = 'Bad request'

    def __init__(self, message=None, status_code=None, **payload):
        super().__init__(message or self.message)
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        data = dict(self.payload)
        data['error'] = self.message
        return data


class ValidationError(PartyError):
    status_code = 400
    message = 'Invalid data'


class Unauthenticated(PartyError):
    status_code = 401
    message = 'Unauthorized'


class NotApproved(PartyError):
    status_code = 403
    message = 'Not approved'


class NoGameAccess(PartyError):
    status_code = 403
    message = 'No access to this game'


class NotFound(PartyError):
    status_code = 404
    message = 'Not found'


class Conflict(PartyError):
    status_code = 409
    message = 'Conflict'


class GameLocked(PartyError):
    status_code = 423
    message = 'Game locked'

    def __init__(self, message=None, **payload):
        payload.setdefault('locked', True)
        super().__init__(message, **payload)


class InvalidCoordinates(ValidationError):
    message = 'Invalid coordinates'


class QuotaExceeded(ValidationError):
    message = 'Maximum squares reached'


class SquareTaken(Conflict):
    message = 'Square already taken'


class AxisNumbersCorrupt(PartyError):
    """Stored axis numbers are not a permutation of 0-9."""
    status_code = 500
    message = 'Axis numbers are corrupt'


def register_error_handlers(flask_app):
    from squares_party import db

    @flask_app.errorhandler(PartyError)
    def handle_party_error(exc):
        if exc.status_code >= 500:
            flask_app.logger.error(f"[error] {exc.message} payload={exc.payload}")
        return jsonify(exc.to_dict()), exc.status_code

    @flask_app.errorhandler(SQLAlchemyError)
    def handle_storage_error(exc):
        db.session.rollback()
        current_app.logger.exception(f"[storage] unexpected database error: {exc}")
        return jsonify({'error': 'Internal server error'}), 500
