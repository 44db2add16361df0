"""
Store Map Authentication Routes

Blueprint for authentication API endpoints:
- POST /login: Login with username/password
- POST /logout: Revoke the current session
- GET /me: Get current user info

All endpoints are prefixed with /api/auth when registered with the app.
"""

from flask import Blueprint, current_app, request, jsonify
from sqlalchemy.exc import SQLAlchemyError

from storemap.models import db, User, UserSession
from storemap.utils.auth import login_required, get_current_user, get_current_session


# Create auth blueprint
auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Login with username and password.

    Creates a new session upon successful authentication.

    Request Body:
        {
            "username": "admin" (required),
            "password": "secret" (required)
        }

    Returns:
        200: Login successful
            {
                "token": "...",
                "expires_at": "2024-01-15T10:00:00+00:00",
                "user": { user data }
            }
        400: Missing required field
            {
                "error": "username is required"
            }
        401: Invalid credentials
            {
                "error": "Invalid credentials",
                "code": "invalid_credentials"
            }
    """
    data = request.get_json(silent=True)

    if not data or not isinstance(data, dict):
        return jsonify({'error': 'Request body is required'}), 400

    username = data.get('username')
    if not username:
        return jsonify({'error': 'username is required'}), 400
    if not isinstance(username, str):
        return jsonify({'error': 'username must be a string'}), 400
    username = username.strip()

    password = data.get('password')
    if not password:
        return jsonify({'error': 'password is required'}), 400
    if not isinstance(password, str):
        return jsonify({'error': 'password must be a string'}), 400

    user = User.query.filter_by(username=username).first()

    if not user or not user.check_password(password):
        current_app.logger.warning(f'Failed login for username {username!r}')
        return jsonify({
            'error': 'Invalid credentials',
            'code': 'invalid_credentials'
        }), 401

    session = UserSession.create_session(
        user_id=user.id,
        hours=current_app.config['SESSION_HOURS'],
    )

    try:
        db.session.add(session)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to create session for {username}: {e}')
        return jsonify({'error': 'Failed to create session'}), 500

    current_app.logger.info(f'User {username} logged in')

    return jsonify({
        'token': session.token,
        'expires_at': session.expires_at.isoformat(),
        'user': user.to_dict(),
    }), 200


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    """
    Logout by deleting the session the request authenticated with.

    Returns:
        200: Logged out
            {
                "message": "Logged out successfully"
            }
    """
    session = get_current_session()

    if session is not None:
        try:
            db.session.delete(session)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            return jsonify({'error': f'Failed to logout: {str(e)}'}), 500

    return jsonify({'message': 'Logged out successfully'}), 200


@auth_bp.route('/me', methods=['GET'])
@login_required
def me():
    """
    Get the authenticated user.

    Returns:
        200: { "user": { user data } }
    """
    return jsonify({'user': get_current_user().to_dict()}), 200
