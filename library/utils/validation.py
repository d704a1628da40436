"""Field readers for JSON request bodies.

JSON may carry any type in any field; these helpers accept only the expected
one and turn everything else into ``InvalidRequest`` (400).
"""
from library.services.errors import InvalidRequest

_MISSING = object()


def json_object(data) -> dict:
    if not isinstance(data, dict):
        raise InvalidRequest("Request body must be a JSON object")
    return data


def required_str(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequest(f"{key} is required and must be a non-empty string")
    return value.strip()


def optional_str(data: dict, key: str):
    """Stripped string, or None when the field is absent, null or blank."""
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidRequest(f"{key} must be a string")
    return value.strip() or None


def optional_bool(data: dict, key: str, default: bool) -> bool:
    value = data.get(key, _MISSING)
    if value is _MISSING:
        return default
    if not isinstance(value, bool):
        raise InvalidRequest(f"{key} must be a boolean")
    return value


def positive_int(data: dict, key: str) -> int:
    value = data.get(key)
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRequest(f"{key} must be an integer")
    if value <= 0:
        raise InvalidRequest(f"{key} must be positive")
    return value
