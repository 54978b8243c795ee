"""
Cache utilities for House Points.

Redis-backed caching with fallback to simple in-memory caching, via
Flask-Caching. Only the behavior-category catalog is cached; balances
and house standings are always computed fresh.

Usage:
    from housepoints.extensions import cache

    @cache.cached(timeout=300, key_prefix=CATEGORIES_CACHE_KEY)
    def list_categories():
        ...

Environment Variables:
    REDIS_URL: Redis connection URL (e.g., redis://localhost:6379/0)
              Falls back to simple cache if not set or unavailable.
"""
import logging
import redis

from ..extensions import cache

logger = logging.getLogger(__name__)

CATEGORIES_CACHE_KEY = 'behavior_categories'

DEFAULT_CACHE_CONFIG = {
    'CACHE_TYPE': 'SimpleCache',  # Fallback: in-memory
    'CACHE_DEFAULT_TIMEOUT': 300,  # 5 minutes
}


def init_cache(app) -> bool:
    """
    Initialize Flask-Caching with Redis or fallback to simple cache.

    Returns:
        bool: True if Redis connected, False if using fallback
    """
    if app.config.get('CACHE_TYPE'):
        # Explicitly configured (tests use NullCache)
        cache.init_app(app)
        return False

    redis_url = app.config.get('REDIS_URL')

    if redis_url:
        try:
            r = redis.from_url(redis_url, socket_connect_timeout=2)
            r.ping()

            app.config['CACHE_TYPE'] = 'RedisCache'
            app.config['CACHE_REDIS_URL'] = redis_url
            app.config['CACHE_DEFAULT_TIMEOUT'] = DEFAULT_CACHE_CONFIG['CACHE_DEFAULT_TIMEOUT']
            app.config['CACHE_KEY_PREFIX'] = 'housepoints:'
            cache.init_app(app)
            logger.info('Cache initialized with Redis')
            return True
        except redis.RedisError as e:
            logger.warning(f'Redis unavailable ({e}), using in-memory cache')

    app.config.update(DEFAULT_CACHE_CONFIG)
    cache.init_app(app)
    logger.info('Cache initialized with SimpleCache')
    return False


def invalidate_categories() -> None:
    """Drop the cached behavior-category catalog."""
    cache.delete(CATEGORIES_CACHE_KEY)
