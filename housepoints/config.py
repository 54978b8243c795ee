"""
Configuration for House Points.

Values come from the environment (a local .env is loaded first). FLASK_ENV
picks one of the classes below; unknown names get the development settings.
"""
import os
from dotenv import load_dotenv

load_dotenv()

MIN_SECRET_KEY_LENGTH = 32

# Substrings that mark a placeholder rather than a generated key
PLACEHOLDER_KEY_HINTS = ('dev', 'change', 'default', 'test', 'secret', 'password')


def _database_url(default: str = '') -> str:
    url = os.getenv('DATABASE_URL', default)
    # Heroku-style URLs use a scheme SQLAlchemy 2 no longer accepts
    if url.startswith('postgres://'):
        url = url.replace('postgres://', 'postgresql://', 1)
    return url


def check_secret_key(key: str) -> str:
    """
    Reject a missing, short or placeholder SECRET_KEY.

    Raises:
        RuntimeError: the key is not fit for production sessions
    """
    if not key:
        raise RuntimeError(
            "SECRET_KEY is not set. Sessions are signed with it, so production "
            "refuses to start without one (try: openssl rand -hex 32)."
        )

    lowered = key.lower()
    hint = next((h for h in PLACEHOLDER_KEY_HINTS if h in lowered), None)
    if hint:
        raise RuntimeError(f"SECRET_KEY looks like a placeholder (contains '{hint}').")

    if len(key) < MIN_SECRET_KEY_LENGTH:
        raise RuntimeError(
            f"SECRET_KEY must be at least {MIN_SECRET_KEY_LENGTH} characters, got {len(key)}."
        )
    return key


class BaseConfig:
    """Settings shared by every environment."""
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-only-session-key')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Notification channel for cache invalidation in the frontends
    REDIS_URL = os.getenv('REDIS_URL')
    POINTS_CHANNEL = os.getenv('POINTS_CHANNEL', 'housepoints:events')

    # Points rules
    MAX_POINTS_MULTIPLIER = int(os.getenv('MAX_POINTS_MULTIPLIER', '10'))
    RECENT_POINTS_LIMIT = 10
    RECENT_POINTS_MAX = 100

    # Accept X-User-ID as the caller identity (never in production)
    AUTH_DEV_HEADERS = False

    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = 24 * 60 * 60  # 24 hours


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    AUTH_DEV_HEADERS = os.getenv('AUTH_DEV_HEADERS', 'true') == 'true'
    SQLALCHEMY_DATABASE_URI = _database_url('sqlite:///housepoints_dev.db')


class ProductionConfig(BaseConfig):
    DEBUG = False
    SECRET_KEY = os.getenv('SECRET_KEY', '')
    SESSION_COOKIE_SECURE = True
    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 5,
        'pool_recycle': 300,
        'pool_pre_ping': True,
    }


class TestingConfig(BaseConfig):
    """In-memory database, no Redis, no caching, dev header auth."""
    TESTING = True
    AUTH_DEV_HEADERS = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    CACHE_TYPE = 'NullCache'
    REDIS_URL = None


config_map = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig
}


def get_config(config_name: str = 'development'):
    """Config class for an environment name."""
    return config_map.get(config_name, DevelopmentConfig)


def validate_config(config_name: str = 'development') -> None:
    """
    Fail fast on settings that would be unsafe for the named environment.

    Raises:
        RuntimeError: production started without a usable SECRET_KEY
    """
    if config_name == 'production':
        check_secret_key(ProductionConfig.SECRET_KEY)
