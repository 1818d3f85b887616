from __future__ import annotations

import logging
from dataclasses import dataclass
from time import time

from django.conf import settings
from django.core.cache import caches

from .errors import RateLimitExceeded


log = logging.getLogger(__name__)

cache = caches["default"]

DEFAULT_LIMITS: dict[str, tuple[int, int]] = {
    "orders.create": (5, 60),
    "chat.send": (15, 60),
    "routing.distance": (10, 60),
    "vouchers.validate": (30, 60),
    "default": (30, 60),
}


@dataclass
class LimitResult:
    allowed: bool
    remaining: int
    retry_after: int


def _key(namespace: str, ident: str) -> str:
    return f"rl:{namespace}:{ident}"


def rate_limit(namespace: str, ident: str, limit: int, window_seconds: int) -> LimitResult:
    """Fixed-window counter. Increments first, then compares.

    ``cache.add`` + ``cache.incr`` are atomic on Redis and on the local-memory
    backend, so two concurrent callers can never both take the last slot.
    """
    key = _key(namespace, ident)
    now = int(time())
    bucket = now // window_seconds
    bucket_key = f"{key}:{bucket}"

    cache.add(bucket_key, 0, timeout=window_seconds)
    try:
        new_val = cache.incr(bucket_key)
    except ValueError:
        # key expired between add and incr
        cache.add(bucket_key, 0, timeout=window_seconds)
        new_val = cache.incr(bucket_key)
    if new_val > limit:
        retry_after = (bucket + 1) * window_seconds - now
        return LimitResult(False, 0, max(1, retry_after))
    return LimitResult(True, max(0, limit - new_val), 0)


def limits_for(endpoint: str) -> tuple[int, int]:
    configured = getattr(settings, "RATE_LIMITS", {}) or {}
    if endpoint in configured:
        limit, window = configured[endpoint]
    elif endpoint in DEFAULT_LIMITS:
        limit, window = DEFAULT_LIMITS[endpoint]
    else:
        limit, window = configured.get("default", DEFAULT_LIMITS["default"])
    return int(limit), int(window)


def enforce(endpoint: str, ident: str) -> LimitResult:
    limit, window = limits_for(endpoint)
    rl = rate_limit(endpoint, ident, limit=limit, window_seconds=window)
    if not rl.allowed:
        log.warning("[rate_limit] blocked endpoint=%s ident=%s retry_after=%s", endpoint, ident, rl.retry_after)
        raise RateLimitExceeded(retry_after=rl.retry_after)
    return rl
