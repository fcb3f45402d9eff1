"""Request body helpers shared by the blueprints and services."""
from flask import request

from squares_party.errors import ValidationError

# Largest value an INTEGER column holds on PostgreSQL
MAX_INT = 2**31 - 1


def json_body() -> dict:
    """The JSON object sent with the request; ``{}`` when there is no body."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Invalid request body')
    return data


def parse_int(value, field: str, minimum: int = 0, maximum: int = MAX_INT) -> int:
    """Whole number from JSON or form input, within ``minimum..maximum``.

    Accepts ints and digit strings. Booleans and floats are rejected.
    """
    if isinstance(value, (bool, float)) or value is None or value == '':
        raise ValidationError(f'{field} must be a whole number')
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f'{field} must be a whole number')
    if number < minimum:
        raise ValidationError(f'{field} must be at least {minimum}')
    if number > maximum:
        raise ValidationError(f'{field} must be at most {maximum}')
    return number
