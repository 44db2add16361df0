"""
Store Map Utility Functions.

This package contains helpers used across the routes:
- auth: Bearer-token authentication and session validation
- permissions: Role checks
- payload: JSON request body parsing and field validation
"""

from storemap.utils.auth import login_required, get_current_user, get_current_session
from storemap.utils.permissions import has_permission, require_role, admin_required

__all__ = [
    'login_required',
    'get_current_user',
    'get_current_session',
    'has_permission',
    'require_role',
    'admin_required',
]
