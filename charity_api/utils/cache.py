import json
import logging
import os

import redis

logger = logging.getLogger(__name__)

REDIS_URL = os.getenv("REDIS_URL", "redis://127.0.0.1:6379/0")
_client = None


def r():
    global _client
    if _client is None:
        _client = redis.Redis.from_url(REDIS_URL, decode_responses=True)
    return _client


def cached_json(key: str, ttl: int, loader):
    """
    Return the JSON value under `key`, computing and storing it with `loader`
    on a miss. A Redis outage falls back to calling `loader` directly.
    """
    try:
        hit = r().get(key)
        if hit:
            return json.loads(hit)
    except redis.RedisError as e:
        logger.warning("cache read failed for %s: %s", key, e)
        return loader()

    value = loader()
    try:
        r().setex(key, ttl, json.dumps(value, default=str))
    except redis.RedisError as e:
        logger.warning("cache write failed for %s: %s", key, e)
    return value


def invalidate(*keys: str) -> None:
    try:
        r().delete(*keys)
    except redis.RedisError as e:
        logger.warning("cache invalidate failed for %s: %s", keys, e)
