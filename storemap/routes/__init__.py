"""
Store Map Routes Package

Blueprint registration for all API route modules:
- Auth: Login, logout, current user
- Stores: Public store, map, product search and queue endpoints
- Admin: Store, sector and product management
- Map Admin: Beacon, map element, wall and map config management
"""

# Import Auth blueprint from its module
from storemap.routes.auth import auth_bp

# Import public Stores blueprint from its module
from storemap.routes.stores import stores_bp

# Import Admin blueprint from its module
from storemap.routes.admin import admin_bp

# Import Map Admin blueprint from its module
from storemap.routes.map_admin import map_admin_bp

__all__ = [
    'auth_bp',
    'stores_bp',
    'admin_bp',
    'map_admin_bp',
]
