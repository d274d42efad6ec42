"""
Redis caching layer and report-facts store.

TTLs:
  - PLUTO data by BBL: 24 hours
  - Geocoding results by normalized address: 24 hours
  - Report facts by report ID: settings.report_facts_ttl (default 24 hours)

Redis is optional. When it is not configured or unreachable, reads miss and
writes return False; a report never fails because of the cache.
"""

from __future__ import annotations

import json
import hashlib
import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from feasibility.config import settings

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None

# TTLs in seconds
TTL_PLUTO = 86400       # 24 hours
TTL_GEOCODE = 86400     # 24 hours

REPORT_FACTS_PREFIX = "report_facts"


async def get_redis() -> Optional[redis.Redis]:
    """Get or create Redis client. Returns None if Redis is not configured."""
    global _redis_client
    if _redis_client is not None:
        return _redis_client

    redis_url = settings.redis_url
    if not redis_url:
        return None

    try:
        _redis_client = redis.from_url(
            redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=3,
            socket_timeout=3,
        )
        await _redis_client.ping()
        return _redis_client
    except (RedisError, OSError) as e:
        logger.warning("Redis unavailable at %s: %s", redis_url, e)
        _redis_client = None
        return None


def _make_key(prefix: str, identifier: str) -> str:
    """Build a cache key."""
    return f"nyc_zoning:{prefix}:{identifier}"


def _normalize_address(address: str) -> str:
    """Normalize an address for cache keying."""
    return hashlib.md5(address.lower().strip().encode()).hexdigest()


async def cache_get(prefix: str, identifier: str) -> Optional[dict]:
    """Get a cached value. Returns None on miss or Redis unavailable."""
    r = await get_redis()
    if not r:
        return None
    try:
        key = _make_key(prefix, identifier)
        val = await r.get(key)
        if val:
            return json.loads(val)
    except (RedisError, OSError, ValueError) as e:
        logger.warning("Cache read failed for %s:%s: %s", prefix, identifier, e)
    return None


async def cache_set(prefix: str, identifier: str, data: dict, ttl: int = TTL_PLUTO) -> bool:
    """Set a cached value. Returns True on success."""
    r = await get_redis()
    if not r:
        return False
    try:
        key = _make_key(prefix, identifier)
        await r.setex(key, ttl, json.dumps(data, default=str))
        return True
    except (RedisError, OSError) as e:
        logger.warning("Cache write failed for %s:%s: %s", prefix, identifier, e)
        return False


# ──────────────────────────────────────────────────────────────────
# REPORT FACTS STORE
# ──────────────────────────────────────────────────────────────────

async def put_facts(report_id: str, source_key: str, data: dict) -> bool:
    """Store one source's facts for a report (e.g. "pluto", "transit_zone").

    Facts for a report live in one Redis hash, one field per source; the
    hash expires settings.report_facts_ttl seconds after the last write.
    """
    r = await get_redis()
    if not r:
        return False
    try:
        key = _make_key(REPORT_FACTS_PREFIX, report_id)
        await r.hset(key, source_key, json.dumps(data, default=str))
        await r.expire(key, settings.report_facts_ttl)
        return True
    except (RedisError, OSError) as e:
        logger.warning("Could not store %s facts for report %s: %s", source_key, report_id, e)
        return False


async def get_facts(report_id: str) -> dict[str, dict]:
    """All stored facts for a report, keyed by source. Empty on miss."""
    r = await get_redis()
    if not r:
        return {}
    try:
        raw = await r.hgetall(_make_key(REPORT_FACTS_PREFIX, report_id))
    except (RedisError, OSError) as e:
        logger.warning("Could not read facts for report %s: %s", report_id, e)
        return {}

    facts = {}
    for source_key, val in (raw or {}).items():
        try:
            facts[source_key] = json.loads(val)
        except ValueError:
            logger.warning("Discarding corrupt %s facts for report %s", source_key, report_id)
    return facts


# ──────────────────────────────────────────────────────────────────
# CONVENIENCE FUNCTIONS
# ──────────────────────────────────────────────────────────────────

async def get_cached_pluto(bbl: str) -> Optional[dict]:
    return await cache_get("pluto", bbl)


async def set_cached_pluto(bbl: str, data: dict):
    await cache_set("pluto", bbl, data, TTL_PLUTO)


async def get_cached_geocode(address: str) -> Optional[dict]:
    return await cache_get("geocode", _normalize_address(address))


async def set_cached_geocode(address: str, data: dict):
    await cache_set("geocode", _normalize_address(address), data, TTL_GEOCODE)
