"""
Store Map Permission Utilities.

Role-based access control on top of @login_required.

Roles (highest to lowest):
- admin (level 2): Full access to the admin API
- user (level 1): Authenticated, read-only

Usage:
    @blueprint.route('/stores', methods=['POST'])
    @admin_required
    def create_store():
        ...
"""

from functools import wraps

from flask import jsonify, g

from storemap.models.user import USER_ROLES
from storemap.utils.auth import login_required

ROLE_ADMIN = 'admin'
ROLE_USER = 'user'


def has_permission(user, minimum_role):
    """
    Check if a user has at least the specified role level.

    Args:
        user: User object with a 'role' attribute, or None
        minimum_role: The minimum required role name string

    Returns:
        True if user has sufficient permission, False otherwise
    """
    if user is None:
        return False
    return user.get_role_level() >= USER_ROLES.get(minimum_role, 0)


def require_role(minimum_role):
    """
    Decorator to require a minimum role level for a route.

    Must be used AFTER @login_required so g.current_user is set.
    Returns 403 Forbidden if the user's role level is insufficient.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = getattr(g, 'current_user', None)

            if not user:
                return jsonify({
                    'error': 'Authentication required',
                    'code': 'not_authenticated'
                }), 401

            if not has_permission(user, minimum_role):
                return jsonify({
                    'error': 'Admin access required' if minimum_role == ROLE_ADMIN else 'Insufficient permissions',
                    'code': 'forbidden',
                    'required_role': minimum_role,
                    'current_role': user.role
                }), 403

            return f(*args, **kwargs)

        return decorated_function

    return decorator


def admin_required(f):
    """
    Decorator shorthand for @login_required followed by @require_role('admin').
    """
    return login_required(require_role(ROLE_ADMIN)(f))
