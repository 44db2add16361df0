"""
Request payload helpers.

Shared parsing for the JSON bodies accepted by the admin API. Every helper
raises PayloadError (a ValueError) with a message suitable for a 400
response, so routes can do:

    try:
        data = get_json_body()
        name = require_string(data, 'name', max_length=200)
    except PayloadError as e:
        return jsonify({'error': str(e)}), 400
"""

from flask import request


class PayloadError(ValueError):
    """Raised when a request body or one of its fields is invalid."""
    pass


def get_json_body():
    """
    Return the request's JSON object body.

    Raises:
        PayloadError: Body missing, not JSON, or not an object
    """
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        raise PayloadError('Request body is required')
    return data


def require_string(data, key, max_length=None):
    """Return a non-empty string field, raising if missing or invalid."""
    value = data.get(key)
    if value is None or value == '':
        raise PayloadError(f'{key} is required')
    return _check_string(key, value, max_length)


def optional_string(data, key, default=None, max_length=None):
    """Return a string field, or ``default`` when absent or null."""
    value = data.get(key)
    if value is None:
        return default
    return _check_string(key, value, max_length)


def _check_string(key, value, max_length):
    if not isinstance(value, str):
        raise PayloadError(f'{key} must be a string')
    if max_length is not None and len(value) > max_length:
        raise PayloadError(f'{key} must be a string with max {max_length} characters')
    return value


def optional_number(data, key, default=None, minimum=None, maximum=None):
    """
    Return a numeric field as float, or ``default`` when absent or null.

    Booleans are rejected even though they are ints in Python.
    """
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PayloadError(f'{key} must be a number')
    return _check_range(key, float(value), minimum, maximum)


def optional_integer(data, key, default=None, minimum=None, maximum=None):
    """Return an integer field, or ``default`` when absent or null."""
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise PayloadError(f'{key} must be an integer')
    return _check_range(key, value, minimum, maximum)


def optional_bool(data, key, default=None):
    """Return a boolean field, or ``default`` when absent or null."""
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise PayloadError(f'{key} must be a boolean')
    return value


def _check_range(key, value, minimum, maximum):
    if minimum is not None and value < minimum:
        raise PayloadError(f'{key} must be at least {minimum}')
    if maximum is not None and value > maximum:
        raise PayloadError(f'{key} must be at most {maximum}')
    return value
