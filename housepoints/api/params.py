"""
Request body parsing helpers shared by the blueprints.
"""
from typing import Any, List, Optional

from flask import request

from ..utils.exceptions import ValidationError


def get_json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def require_int(data: dict, field: str) -> int:
    if field not in data or data[field] is None:
        raise ValidationError(f'{field} is required', field=field)
    return to_int(data[field], field)


def optional_int(data: dict, field: str, default: Optional[int] = None) -> Optional[int]:
    if data.get(field) is None:
        return default
    return to_int(data[field], field)


def to_int(value: Any, field: str) -> int:
    """Accept ints and integer strings; reject floats and bools."""
    if isinstance(value, bool) or isinstance(value, float):
        raise ValidationError(f'{field} must be an integer', field=field)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be an integer', field=field)


def require_int_list(data: dict, field: str) -> List[int]:
    values = data.get(field)
    if not isinstance(values, list) or not values:
        raise ValidationError(f'{field} must be a non-empty list', field=field)
    return [to_int(v, field) for v in values]


def require_str(data: dict, field: str) -> str:
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'{field} is required', field=field)
    return value.strip()
