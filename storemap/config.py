"""
Store Map Configuration Module

Configuration settings for database, Redis queue cache, sessions, CORS and
server. All sensitive values are loaded from environment variables.
"""

import os
from pathlib import Path


class Config:
    """Base configuration class with default settings."""

    # Flask Settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')

    # Base Directory
    BASE_DIR = Path(__file__).parent.resolve()

    # Database Settings (SQLite unless DATABASE_URL points elsewhere)
    DATABASE_PATH = Path(os.environ.get('STOREMAP_DATABASE_PATH', BASE_DIR / 'data' / 'storemap.db'))
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        f'sqlite:///{DATABASE_PATH}'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Redis Settings (checkout queue cache)
    REDIS_URL = os.environ.get('REDIS_URL', 'redis://localhost:6379/0')
    QUEUE_TTL_SECONDS = int(os.environ.get('QUEUE_TTL_SECONDS', 600))

    # Auth Settings
    SESSION_HOURS = int(os.environ.get('SESSION_HOURS', 24))

    # Sector hierarchy: deepest level served before the build is aborted
    SECTOR_TREE_MAX_DEPTH = int(os.environ.get('SECTOR_TREE_MAX_DEPTH', 64))

    # CORS Settings (admin front-end origin)
    CORS_ALLOWED_ORIGIN = os.environ.get('CORS_ALLOWED_ORIGIN', 'http://localhost:3000')
    CORS_ALLOWED_METHODS = 'GET, POST, PUT, PATCH, DELETE, OPTIONS'
    CORS_ALLOWED_HEADERS = 'Content-Type, Authorization, X-Requested-With'
    CORS_MAX_AGE = 86400

    # Logging
    LOG_DIR = Path(os.environ.get('STOREMAP_LOG_DIR', BASE_DIR / 'logs'))
    LOG_TO_FILE = True

    # Seed default admin account and demo store on first run
    SEED_DEMO_DATA = os.environ.get('SEED_DEMO_DATA', 'true').lower() in ('1', 'true', 'yes')

    # Server Settings
    PORT = int(os.environ.get('STOREMAP_PORT', 8080))
    HOST = os.environ.get('STOREMAP_HOST', '0.0.0.0')

    @classmethod
    def init_app(cls, app):
        """Initialize application with this configuration."""
        # Ensure storage directory exists for the default SQLite file
        if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///') \
                and ':memory:' not in app.config['SQLALCHEMY_DATABASE_URI']:
            cls.DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)


class DevelopmentConfig(Config):
    """Development configuration with debug enabled."""

    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration with in-memory database."""

    DEBUG = True
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SEED_DEMO_DATA = False
    LOG_TO_FILE = False
    SECTOR_TREE_MAX_DEPTH = 64


class ProductionConfig(Config):
    """Production configuration with strict security settings."""

    DEBUG = False
    TESTING = False
    SEED_DEMO_DATA = os.environ.get('SEED_DEMO_DATA', 'false').lower() in ('1', 'true', 'yes')

    @classmethod
    def init_app(cls, app):
        """Production-specific initialization."""
        Config.init_app(app)

        # Verify required environment variables are set
        required_vars = [
            'SECRET_KEY',
            'DATABASE_URL',
        ]
        missing = [var for var in required_vars if not os.environ.get(var)]
        if missing:
            raise ValueError(f"Missing required environment variables: {', '.join(missing)}")


# Configuration mapping by environment name
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig,
}


def get_config(env_name=None):
    """Get configuration class by environment name.

    Args:
        env_name: Environment name ('development', 'testing', 'production').
                  If None, reads from FLASK_ENV environment variable.

    Returns:
        Configuration class for the specified environment.
    """
    if env_name is None:
        env_name = os.environ.get('FLASK_ENV', 'development')
    return config.get(env_name, config['default'])
