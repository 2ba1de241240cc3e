"""
Simple in-memory rate limiter for sensitive routes.

Switched by the RATE_LIMIT_ENABLED setting (default: on). Auth endpoints use
RATE_LIMIT_AUTH_PER_MINUTE (default: 10).
"""

from __future__ import annotations

import time
from collections import defaultdict
from functools import wraps
from threading import Lock

from flask import current_app, request

from charity_api.errors import CommonErrorCode, error_response

_lock = Lock()
_counts: dict[str, list[float]] = defaultdict(list)
_window = 60  # seconds


def _clean_old(ts_list: list[float], window: int) -> None:
    cutoff = time.time() - window
    while ts_list and ts_list[0] < cutoff:
        ts_list.pop(0)


def is_rate_limited(key: str, limit: int) -> bool:
    """Return True if the key has exceeded the limit within the window."""
    if limit <= 0:
        return False
    with _lock:
        _clean_old(_counts[key], _window)
        if len(_counts[key]) >= limit:
            return True
        _counts[key].append(time.time())
        return False


def reset() -> None:
    with _lock:
        _counts.clear()


def rate_limit_key() -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


def rate_limit(limit_per_minute: int | None = None, key_prefix: str = ""):
    """Rate limit a route per client IP; None reads RATE_LIMIT_AUTH_PER_MINUTE."""

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not current_app.config["RATE_LIMIT_ENABLED"]:
                return fn(*args, **kwargs)
            limit = limit_per_minute or current_app.config["RATE_LIMIT_AUTH_PER_MINUTE"]
            key = f"{key_prefix or fn.__name__}:{rate_limit_key()}"
            if is_rate_limited(key, limit):
                return error_response(
                    429,
                    CommonErrorCode.TOO_MANY_REQUESTS,
                    f"Rate limit of {limit} requests per minute exceeded",
                )
            return fn(*args, **kwargs)

        return wrapper

    return decorator
