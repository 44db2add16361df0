"""
Store Map Models Package.

SQLAlchemy models for the store-mapping backend including:
- Stores (top-level physical locations)
- Sectors (nested floor-plan regions)
- Products (items attached to a sector)
- Walls, Beacons, Map Elements (flat per-store map records)
- Store Map Configs (real-world to pixel scaling)
- Users and User Sessions (admin authentication)
"""

from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import DateTime as _SADateTime
from sqlalchemy.types import TypeDecorator


class DateTimeUTC(TypeDecorator):
    """DateTime type that ensures values are always timezone-aware (UTC).

    SQLite stores datetimes as naive strings.  This TypeDecorator adds UTC
    timezone info when reading and strips it when writing, so Python code
    can safely compare with ``datetime.now(timezone.utc)``.
    """

    impl = _SADateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and isinstance(value, datetime):
            if value.tzinfo is not None:
                value = value.astimezone(timezone.utc)
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=timezone.utc)
        return value


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


# SQLAlchemy database instance
db = SQLAlchemy(model_class=Base)


def utcnow():
    """Timezone-aware current time, used as a column default."""
    return datetime.now(timezone.utc)


# Import models after db is defined to avoid circular imports
from storemap.models.store import Store
from storemap.models.sector import Sector
from storemap.models.product import Product
from storemap.models.wall import Wall
from storemap.models.beacon import Beacon, BEACON_TYPES
from storemap.models.map_element import MapElement, MAP_ELEMENT_TYPES
from storemap.models.map_config import StoreMapConfig, DEFAULT_MAP_CONFIG
from storemap.models.user import User, USER_ROLES
from storemap.models.user_session import UserSession

__all__ = [
    'db',
    'Base',
    'DateTimeUTC',
    'utcnow',
    'Store',
    'Sector',
    'Product',
    'Wall',
    'Beacon',
    'BEACON_TYPES',
    'MapElement',
    'MAP_ELEMENT_TYPES',
    'StoreMapConfig',
    'DEFAULT_MAP_CONFIG',
    'User',
    'USER_ROLES',
    'UserSession',
]
