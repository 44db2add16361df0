"""
Pytest configuration and fixtures for Store Map tests.

This module provides shared fixtures for testing:
- Flask application with test configuration
- In-memory SQLite database
- Test client
- In-memory Redis stand-in for the queue service
- Sample users, sessions, stores and sector trees
- create_test_* helpers for building records with custom attributes
"""

import fnmatch
import os
import sys

import pytest

# Add project root to path for storemap package imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from storemap.app import create_app
from storemap.models import (
    db,
    Store,
    Sector,
    Product,
    Wall,
    Beacon,
    MapElement,
    User,
    UserSession,
)
from storemap.services.queue_service import QueueService


class FakeRedis:
    """
    In-memory stand-in for the subset of redis.Redis used by QueueService.

    TTLs are recorded but never enforced; tests expire keys with expire_now().
    """

    def __init__(self):
        self.data = {}
        self.ttls = {}

    def set(self, key, value, ex=None):
        self.data[key] = value
        self.ttls[key] = ex
        return True

    def mget(self, keys):
        return [self.data.get(key) for key in keys]

    def scan_iter(self, match=None):
        for key in list(self.data):
            if match is None or fnmatch.fnmatchcase(key, match):
                yield key

    def expire_now(self, key):
        self.data.pop(key, None)
        self.ttls.pop(key, None)


@pytest.fixture(scope='function')
def fake_redis():
    """Provide an empty FakeRedis client."""
    return FakeRedis()


@pytest.fixture(scope='function')
def app(fake_redis):
    """
    Create a Flask application configured for testing.

    This fixture provides an isolated Flask app with:
    - In-memory SQLite database
    - Testing mode enabled
    - Queue service backed by FakeRedis
    - Clean database tables

    Yields:
        Flask application instance
    """
    application = create_app(config_name='testing')
    application.config['TESTING'] = True
    application.extensions['queue_service'] = QueueService(
        fake_redis,
        ttl_seconds=application.config['QUEUE_TTL_SECONDS'],
    )

    # Create all tables in test database
    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """
    Create a test client for the Flask application.

    Args:
        app: Flask application fixture

    Yields:
        Flask test client
    """
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """
    Provide a database session for testing.

    Args:
        app: Flask application fixture

    Yields:
        SQLAlchemy session
    """
    with app.app_context():
        yield db.session


# =============================================================================
# User and Session Fixtures
# =============================================================================

@pytest.fixture(scope='function')
def sample_admin(db_session):
    """
    Create an admin user for testing.

    Returns:
        User instance with username 'admin' and password 'TestPassword123!'
    """
    return create_test_user(db_session, 'admin', role='admin')


@pytest.fixture(scope='function')
def sample_user(db_session):
    """
    Create a non-admin user for testing.

    Returns:
        User instance with username 'viewer' and password 'TestPassword123!'
    """
    return create_test_user(db_session, 'viewer', role='user')


@pytest.fixture(scope='function')
def admin_session(db_session, sample_admin):
    """Create a live session for the admin user."""
    return create_test_session(db_session, sample_admin.id)


@pytest.fixture(scope='function')
def user_session(db_session, sample_user):
    """Create a live session for the non-admin user."""
    return create_test_session(db_session, sample_user.id)


@pytest.fixture(scope='function')
def admin_headers(admin_session):
    """Authorization headers for the admin user."""
    return get_auth_headers(admin_session)


@pytest.fixture(scope='function')
def user_headers(user_session):
    """Authorization headers for the non-admin user."""
    return get_auth_headers(user_session)


# =============================================================================
# Store Fixtures
# =============================================================================

@pytest.fixture(scope='function')
def sample_store(db_session):
    """
    Create a store with no sectors.

    Returns:
        Store instance
    """
    return create_test_store(db_session, name='Test Store', address='1 Test Street')


@pytest.fixture(scope='function')
def sample_tree(db_session, sample_store):
    """
    Create a small sector tree in the sample store.

    Layout (ids in creation order):
        Dairy (root, products Milk and Cheese)
        +-- Milk and Cream (product Milk 2.5%)
        +-- Yogurts (no products)
        Bakery (root, product Bread)

    Returns:
        Dict with the store, sectors and products keyed by short name
    """
    dairy = create_test_sector(db_session, sample_store.id, 'Dairy')
    bakery = create_test_sector(db_session, sample_store.id, 'Bakery')
    cream = create_test_sector(db_session, sample_store.id, 'Milk and Cream', parent=dairy)
    yogurts = create_test_sector(db_session, sample_store.id, 'Yogurts', parent=dairy)

    milk = create_test_product(db_session, dairy.id, 'Milk', price=1.5)
    cheese = create_test_product(db_session, dairy.id, 'Cheese', price=7.25)
    milk_25 = create_test_product(db_session, cream.id, 'Milk 2.5%', price=1.2)
    bread = create_test_product(db_session, bakery.id, 'Bread', price=2.0)

    return {
        'store': sample_store,
        'dairy': dairy,
        'bakery': bakery,
        'cream': cream,
        'yogurts': yogurts,
        'milk': milk,
        'cheese': cheese,
        'milk_25': milk_25,
        'bread': bread,
    }


# =============================================================================
# Test helper functions
# =============================================================================

def get_auth_headers(session):
    """Build the Authorization header for a UserSession."""
    return {'Authorization': f'Bearer {session.token}'}


def create_test_user(db_session, username, role='user', password='TestPassword123!'):
    """
    Helper function to create a user with custom attributes.

    Args:
        db_session: Database session
        username: Login name
        role: 'admin' or 'user'
        password: Password to set

    Returns:
        User instance
    """
    user = User(username=username, role=role)
    user.set_password(password)
    db_session.add(user)
    db_session.commit()
    return user


def create_test_session(db_session, user_id, hours=24):
    """
    Helper function to create a user session.

    Args:
        db_session: Database session
        user_id: ID of the user to create session for
        hours: Session lifetime; negative values create an expired session

    Returns:
        UserSession instance
    """
    session = UserSession.create_session(user_id=user_id, hours=hours)
    db_session.add(session)
    db_session.commit()
    return session


def create_test_store(db_session, name='Test Store', address=''):
    """Helper function to create a store."""
    store = Store(name=name, address=address)
    db_session.add(store)
    db_session.commit()
    return store


def create_test_sector(db_session, store_id, name, parent=None, **fields):
    """
    Helper function to create a sector with a consistent level.

    Args:
        db_session: Database session
        store_id: Owning store ID
        name: Sector name
        parent: Parent Sector instance, or None for a root sector
        **fields: Any other Sector column values

    Returns:
        Sector instance
    """
    sector = Sector(
        store_id=store_id,
        name=name,
        parent_id=parent.id if parent else None,
        level=parent.level + 1 if parent else 0,
        **fields
    )
    db_session.add(sector)
    db_session.commit()
    return sector


def create_test_product(db_session, sector_id, name, price=1.0, description=''):
    """Helper function to create a product in a sector."""
    product = Product(sector_id=sector_id, name=name, price=price, description=description)
    db_session.add(product)
    db_session.commit()
    return product


def create_test_wall(db_session, store_id, start=(0.0, 0.0), end=(10.0, 0.0), thickness=0.1):
    """Helper function to create a wall segment."""
    wall = Wall(
        store_id=store_id,
        start_x=start[0],
        start_y=start[1],
        end_x=end[0],
        end_y=end[1],
        thickness=thickness,
    )
    db_session.add(wall)
    db_session.commit()
    return wall


def create_test_beacon(db_session, store_id, mac='AA:BB:CC:DD:EE:01', **fields):
    """Helper function to create a beacon."""
    beacon = Beacon(store_id=store_id, mac=mac, **fields)
    db_session.add(beacon)
    db_session.commit()
    return beacon


def create_test_map_element(db_session, store_id, type='cashier', name='Checkout', **fields):
    """Helper function to create a map element."""
    element = MapElement(store_id=store_id, type=type, name=name, **fields)
    db_session.add(element)
    db_session.commit()
    return element
