"""
Store Map Authentication Utilities.

Provides bearer-token authentication for the API on top of Flask-Login.

Features:
- Flask-Login request loader that resolves "Authorization: Bearer <token>"
- Session validation against UserSession rows with expiry
- @login_required decorator returning JSON 401 instead of redirecting
- Current user/session retrieval via Flask's g object

Usage:
    from storemap.utils.auth import login_required, get_current_user

    @blueprint.route('/protected')
    @login_required
    def protected_route():
        user = get_current_user()
        return jsonify({'user': user.to_dict()})
"""

from functools import wraps

from flask import request, jsonify, g
from flask_login import current_user

from storemap.models import db, User, UserSession


def get_current_user():
    """
    Get the currently authenticated user.

    Returns:
        User object if authenticated, None otherwise
    """
    return getattr(g, 'current_user', None)


def get_current_session():
    """
    Get the session the current request authenticated with.

    Returns:
        UserSession object if authenticated, None otherwise
    """
    return getattr(g, 'current_session', None)


def _extract_token_from_header():
    """
    Extract the bearer token from the Authorization header.

    Supports the format: "Bearer <token>"

    Returns:
        Token string if present and valid format, None otherwise
    """
    auth_header = request.headers.get('Authorization')
    if not auth_header:
        return None

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != 'bearer':
        return None

    return parts[1]


def _validate_session(token):
    """
    Validate a session token and return the associated user and session.

    Expired sessions are deleted when encountered. On success the session's
    last_active timestamp is updated.

    Args:
        token: The session token to validate

    Returns:
        Tuple of (User, UserSession) if valid, (None, None) otherwise
    """
    if not token:
        return None, None

    session = UserSession.query.filter_by(token=token).first()
    if not session:
        return None, None

    if session.is_expired():
        try:
            db.session.delete(session)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return None, None

    user = db.session.get(User, session.user_id)
    if not user:
        return None, None

    try:
        session.update_activity()
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    return user, session


def load_user_from_request(req):
    """
    Flask-Login request loader.

    Resolves the bearer token of the incoming request to a user and stores
    the matching session on ``g.current_session``.

    Args:
        req: The incoming request

    Returns:
        User if the token is valid, None otherwise
    """
    user, session = _validate_session(_extract_token_from_header())
    if user is not None:
        g.current_session = session
    return user


def login_required(f):
    """
    Decorator to require authentication for a route.

    On success the user is stored in ``g.current_user``. On failure a
    401 JSON response is returned, with ``code`` set to ``missing_token``
    or ``invalid_session``.

    Args:
        f: The route function to wrap

    Returns:
        Decorated function that enforces authentication
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            if not _extract_token_from_header():
                return jsonify({
                    'error': 'Authorization header required',
                    'code': 'missing_token'
                }), 401
            return jsonify({
                'error': 'Invalid or expired token',
                'code': 'invalid_session'
            }), 401

        g.current_user = current_user._get_current_object()
        return f(*args, **kwargs)

    return decorated_function
