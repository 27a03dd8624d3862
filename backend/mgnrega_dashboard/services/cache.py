import time
from mgnrega_dashboard.core.config import settings

# Local payload cache, keyed by selection
_cache = {}


def _evict_expired(ttl, now):
    for key in [k for k, entry in _cache.items() if now - entry["time"] >= ttl]:
        del _cache[key]


def cache_get(key, ttl=None):
    ttl = settings.CACHE_TTL if ttl is None else ttl
    now = time.time()
    _evict_expired(ttl, now)
    entry = _cache.get(key)
    return entry["value"] if entry else None


def cache_set(key, value):
    _cache[key] = {"value": value, "time": time.time()}


def cache_size():
    return len(_cache)


def cache_clear():
    _cache.clear()
