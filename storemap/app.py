"""
Flask Application Factory for Store Map Service.

This module provides the create_app() factory function that creates and
configures the Flask application. It initializes:
- SQLAlchemy database connection (SQLite unless DATABASE_URL is set)
- Flask-Login bearer-token authentication
- Redis-backed checkout queue service
- Blueprint registration
- CORS headers for the admin front-end
- Error handlers
- Logging configuration
- Default admin and demo store seeding

Usage:
    # Development
    python -m storemap.wsgi

    # Production
    gunicorn -w 4 -b 0.0.0.0:8080 'storemap.app:create_app()'
"""

import logging
import secrets
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify, request
from flask_login import LoginManager
from flask_migrate import Migrate

from storemap.config import get_config
from storemap.models import db, User, Store, Sector, Product
from storemap.services.queue_service import QueueService
from storemap.utils.auth import load_user_from_request

# Global migrate instance
migrate = Migrate()

# Demo store created on first run: one root sector with two sub-sectors
DEMO_STORE = {
    'name': 'Demo Supermarket',
    'address': '123 Example Street',
    'sector': {
        'name': 'Dairy',
        'description': 'All dairy products',
        'position_x': 10.0, 'position_y': 5.0, 'width': 8.0, 'height': 6.0,
        'products': [
            {'name': 'Milk', 'description': 'Milk 2.5%', 'price': 85.50},
            {'name': 'Cheese', 'description': 'Hard cheese', 'price': 320.00},
        ],
        'sub_sectors': [
            {
                'name': 'Milk and Cream',
                'description': 'Milk and cream of all kinds',
                'position_x': 10.5, 'position_y': 5.5, 'width': 3.0, 'height': 2.0,
                'products': [
                    {'name': 'Milk 2.5%', 'description': 'Pasteurized milk', 'price': 85.50},
                    {'name': 'Milk 3.2%', 'description': 'Whole milk', 'price': 92.00},
                ],
                'sub_sectors': [],
            },
            {
                'name': 'Yogurts and Desserts',
                'description': 'Yogurts, curd snacks, desserts',
                'position_x': 14.0, 'position_y': 5.5, 'width': 3.0, 'height': 2.0,
                'products': [
                    {'name': 'Natural Yogurt', 'description': 'Plain yogurt', 'price': 45.00},
                    {'name': 'Fruit Yogurt', 'description': 'Peach yogurt', 'price': 55.00},
                ],
                'sub_sectors': [],
            },
        ],
    },
}


def create_app(config_name: Optional[str] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name ('development', 'testing', 'production').
                    If None, reads from FLASK_ENV environment variable.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Load configuration
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    config_class.init_app(app)

    # Store config class for reference
    app.config['CONFIG_CLASS'] = config_class

    # Configure logging first so seeding output is captured
    _configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Initialize Flask-Login (bearer tokens only, no cookie login)
    login_manager = LoginManager()
    login_manager.init_app(app)
    login_manager.request_loader(load_user_from_request)

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    # Checkout queue cache; the Redis connection is opened lazily
    app.extensions['queue_service'] = QueueService.from_url(
        app.config['REDIS_URL'],
        ttl_seconds=app.config['QUEUE_TTL_SECONDS'],
    )

    # Create database tables and seed default data
    with app.app_context():
        db.create_all()
        if app.config['SEED_DEMO_DATA']:
            _seed_default_admin(app)
            _seed_demo_store(app)

    # Register blueprints
    _register_blueprints(app)

    # Register CORS handling
    _register_cors(app)

    # Register error handlers
    _register_error_handlers(app)

    # Register health check endpoint
    @app.route('/health')
    @app.route('/api/health')
    def health_check():
        """Health check endpoint for monitoring."""
        return jsonify({
            'status': 'healthy',
            'service': 'storemap',
            'timestamp': datetime.now(timezone.utc).isoformat()
        })

    return app


def _seed_default_admin(app: Flask) -> None:
    """
    Seed the default admin account on first run.

    The account is created with a randomly generated temporary password,
    which is logged once at INFO level.

    Args:
        app: Flask application instance.
    """
    if User.query.filter_by(username='admin').first():
        app.logger.debug('Admin user already exists, skipping')
        return

    temp_password = secrets.token_urlsafe(16)

    user = User(username='admin', role='admin')
    user.set_password(temp_password)
    db.session.add(user)

    try:
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        app.logger.error(f'Failed to seed default admin: {e}')
        return

    app.logger.info(f'Created default admin user: admin (temporary password: {temp_password})')


def _seed_demo_store(app: Flask) -> None:
    """
    Seed a demo store with a small sector hierarchy and products.

    Idempotent: skipped when any store exists.
    """
    if Store.query.first():
        app.logger.debug('Stores already exist, skipping demo store seeding')
        return

    store = Store(name=DEMO_STORE['name'], address=DEMO_STORE['address'])
    db.session.add(store)
    db.session.flush()

    def add_sector(data, parent=None):
        sector = Sector(
            store_id=store.id,
            name=data['name'],
            description=data['description'],
            position_x=data['position_x'],
            position_y=data['position_y'],
            width=data['width'],
            height=data['height'],
            level=parent.level + 1 if parent else 0,
            parent_id=parent.id if parent else None,
        )
        db.session.add(sector)
        db.session.flush()
        for item in data['products']:
            db.session.add(Product(sector_id=sector.id, **item))
        for child in data['sub_sectors']:
            add_sector(child, sector)

    add_sector(DEMO_STORE['sector'])

    try:
        db.session.commit()
        app.logger.info(f"Seeded demo store: {store.name} (id {store.id})")
    except Exception as e:
        db.session.rollback()
        app.logger.error(f'Failed to seed demo store: {e}')


def _configure_logging(app: Flask) -> None:
    """
    Configure application logging.

    Args:
        app: Flask application instance.
    """
    log_format = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    # Set up file handler if log path is writable
    if app.config.get('LOG_TO_FILE'):
        log_dir = app.config['LOG_DIR']
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_dir / 'storemap.log')
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(log_format)
            # app.logger is 'storemap.app' and propagates here
            logging.getLogger('storemap').addHandler(file_handler)
        except (OSError, PermissionError):
            # Log path not writable (dev environment), skip file logging
            pass

    # Set application log level
    app.logger.setLevel(logging.INFO)
    logging.getLogger('storemap').setLevel(logging.DEBUG if app.debug else logging.INFO)


def _register_blueprints(app: Flask) -> None:
    """
    Register API blueprints with the application.

    Args:
        app: Flask application instance.
    """
    from storemap.routes import auth_bp, stores_bp, admin_bp, map_admin_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.logger.debug('Registered auth blueprint at /api/auth')

    app.register_blueprint(stores_bp, url_prefix='/api/stores')
    app.logger.debug('Registered stores blueprint at /api/stores')

    # Both admin blueprints share the /api/admin prefix
    app.register_blueprint(admin_bp, url_prefix='/api/admin')
    app.register_blueprint(map_admin_bp, url_prefix='/api/admin')
    app.logger.debug('Registered admin blueprints at /api/admin')


def _register_cors(app: Flask) -> None:
    """
    Add CORS headers for the configured front-end origin.

    Preflight OPTIONS requests are answered with 204 before routing.

    Args:
        app: Flask application instance.
    """
    @app.before_request
    def handle_preflight():
        if request.method == 'OPTIONS':
            return app.response_class(status=204)
        return None

    @app.after_request
    def add_cors_headers(response):
        response.headers['Access-Control-Allow-Origin'] = app.config['CORS_ALLOWED_ORIGIN']
        response.headers['Access-Control-Allow-Methods'] = app.config['CORS_ALLOWED_METHODS']
        response.headers['Access-Control-Allow-Headers'] = app.config['CORS_ALLOWED_HEADERS']
        response.headers['Access-Control-Allow-Credentials'] = 'true'
        response.headers['Access-Control-Max-Age'] = str(app.config['CORS_MAX_AGE'])
        return response


def _register_error_handlers(app: Flask) -> None:
    """
    Register error handlers for common HTTP errors.

    Args:
        app: Flask application instance.
    """
    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({
            'status': 'error',
            'error': 'Bad Request',
            'message': str(error.description) if hasattr(error, 'description') else 'Invalid request'
        }), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'status': 'error',
            'error': 'Not Found',
            'message': 'The requested resource was not found'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'status': 'error',
            'error': 'Method Not Allowed',
            'message': 'The method is not allowed for the requested URL'
        }), 405

    @app.errorhandler(500)
    def internal_server_error(error):
        return jsonify({
            'status': 'error',
            'error': 'Internal Server Error',
            'message': 'An unexpected error occurred'
        }), 500
