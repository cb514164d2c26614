"""
Caching helpers for lookups that are cheap to repeat but slow to fetch
(branch identifier resolution). Record lists are never cached.
"""
from django.core.cache import cache
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
BRANCH_RESOLVE_CACHE_TTL = 300  # 5 minutes


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    # Hash it to keep key length reasonable
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def _generation_key(tenant):
    return f"branch_resolve_gen:{tenant}"


def _generation(tenant):
    return cache.get_or_set(_generation_key(tenant), 1, None)


def get_cached_branch_id(tenant, identifier):
    """Returns tuple: (cached_object_id, cache_key)"""
    cache_key = make_cache_key("branch_resolve", tenant, _generation(tenant), str(identifier))
    return cache.get(cache_key), cache_key


def cache_branch_id(cache_key, object_id, ttl=BRANCH_RESOLVE_CACHE_TTL):
    cache.set(cache_key, object_id, ttl)
    logger.debug(f"Cached branch resolution: {cache_key} -> {object_id}")


def invalidate_branch_cache(tenant):
    """Drop every cached resolution for a tenant by bumping its key generation"""
    try:
        cache.incr(_generation_key(tenant))
    except ValueError:
        cache.set(_generation_key(tenant), 2, None)
    logger.debug(f"Invalidated branch resolution cache for tenant {tenant}")
