"""
Caching utilities for expensive dashboard queries
Uses Redis (django-redis) in production, local memory otherwise
"""
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
DASHBOARD_STATS_CACHE_TTL = 300  # 5 minutes
DASHBOARD_TRENDS_CACHE_TTL = 600  # 10 minutes
PAYMENT_STATS_CACHE_TTL = 300  # 5 minutes

OWNER_VERSION_KEY_PREFIX = 'owner_cache_version:'
OWNER_VERSION_TTL = 60 * 60 * 24 * 30  # 30 days


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def get_owner_cache_version(owner_id) -> int:
    """Current cache generation for everything derived from an owner's data"""
    version = cache.get(f"{OWNER_VERSION_KEY_PREFIX}{owner_id}")
    return version or 1


def bump_owner_cache_version(owner_id):
    """Invalidate every cached aggregate for an owner by moving to a new generation"""
    if owner_id is None:
        return
    key = f"{OWNER_VERSION_KEY_PREFIX}{owner_id}"
    version = get_owner_cache_version(owner_id) + 1
    cache.set(key, version, OWNER_VERSION_TTL)
    logger.debug(f"Owner {owner_id} cache version bumped to {version}")


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive per-owner queries.

    The first positional argument must be the owner id; the owner's cache
    version is folded into the key so that data changes invalidate it.

    Usage:
        @cached_query(cache_ttl=120, key_prefix="dashboard_stats")
        def get_dashboard_stats(owner_id, property_id=None):
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(owner_id, *args, **kwargs):
            version = get_owner_cache_version(owner_id)
            cache_key = make_cache_key(key_prefix, owner_id, version, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(owner_id, *args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            return result
        return wrapper
    return decorator
