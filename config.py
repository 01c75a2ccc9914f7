# config.py
# Configuration settings for the Wanderlust Flask application

import os
from datetime import timedelta

# Determine the base directory of the application (where config.py lives)
basedir = os.path.abspath(os.path.dirname(__file__))

# Instance folder sits next to config.py/run.py
instance_path = os.path.join(basedir, 'instance')


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing at startup."""


class Config:
    """Base configuration class. Values come from the environment (.env is loaded by run.py)."""
    SECRET_KEY = os.environ.get('SECRET_KEY')

    # Render and Heroku hand out 'postgres://', SQLAlchemy wants 'postgresql://'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', '').replace('postgres://', 'postgresql://', 1) or None
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Server-side sessions
    SESSION_COOKIE_NAME = 'wanderlust_session'
    SESSION_COOKIE_HTTPONLY = True
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)
    SESSION_TOUCH_AFTER = timedelta(hours=24)

    # Uploaded listing images
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(instance_path, 'uploads')
    MAX_CONTENT_LENGTH = 6 * 1024 * 1024
    DEFAULT_LISTING_IMAGE = 'https://images.unsplash.com/photo-1625505826533-5c80aca7d157?w=800'

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    LOG_FILE = os.environ.get('LOG_FILE')  # e.g. 'wanderlust.log' inside the instance folder

    PORT = int(os.environ.get('PORT', 3000))
    SITE_NAME = 'Wanderlust'

    REQUIRED_SETTINGS = ('SECRET_KEY', 'SQLALCHEMY_DATABASE_URI')

    @classmethod
    def validate(cls):
        missing = [name for name in cls.REQUIRED_SETTINGS if not getattr(cls, name, None)]
        if missing:
            raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")


class TestingConfig(Config):
    """Configuration specific to testing."""
    TESTING = True

    # In-memory database, rebuilt for each test by the fixtures
    SQLALCHEMY_DATABASE_URI = 'sqlite://'

    # Disable CSRF protection during tests for simplicity
    WTF_CSRF_ENABLED = False

    LOGIN_DISABLED = False

    # Use a fixed, predictable secret key for testing sessions
    SECRET_KEY = 'testing-secret-key'

    SERVER_NAME = 'localhost.test'
    UPLOAD_FOLDER = os.path.join(instance_path, 'test_uploads')
    LOG_LEVEL = 'WARNING'


class ProductionConfig(Config):
    SESSION_COOKIE_SECURE = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'WARNING').upper()
