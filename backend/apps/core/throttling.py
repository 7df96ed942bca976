"""
Per-client rate limits for public endpoints.

Invite lookups, invite consumption and registration checks are reachable
without a session, so each is capped per client IP. Counters live in
Django's cache (a DatabaseCache in production, shared by every worker)
under ``rate_limit:<scope>:<identity>`` and expire with their window.
"""

from dataclasses import dataclass

from django.core.cache import cache
from django.http import HttpRequest
from ninja.errors import HttpError

from apps.core.logging import get_logger
from apps.core.utils import get_client_ip

logger = get_logger(__name__)


@dataclass(frozen=True)
class RateLimit:
    """At most max_requests per identity within window_seconds."""

    scope: str
    max_requests: int
    window_seconds: int

    def key_for(self, identity: str) -> str:
        return f"rate_limit:{self.scope}:{identity}"


class RateLimitExceeded(Exception):
    """Raised when an identity has used up its window."""

    def __init__(self, limit: RateLimit) -> None:
        super().__init__("Too many requests. Please try again later.")
        self.limit = limit
        self.retry_after = limit.window_seconds


def hit(limit: RateLimit, identity: str) -> int:
    """
    Count one request and return the identity's total in the current window.

    ``add()`` seeds the counter only when absent and ``incr()`` is atomic in
    the database cache, so concurrent workers share one count.

    Raises:
        RateLimitExceeded: If the count goes past limit.max_requests
    """
    key = limit.key_for(identity)
    cache.add(key, 0, timeout=limit.window_seconds)
    try:
        count = cache.incr(key)
    except ValueError:
        # Expired between add() and incr()
        cache.set(key, 1, timeout=limit.window_seconds)
        count = 1

    if count > limit.max_requests:
        logger.warning(
            "rate_limit_exceeded",
            scope=limit.scope,
            limit=limit.max_requests,
            window=limit.window_seconds,
        )
        raise RateLimitExceeded(limit)
    return count


def enforce_client_limit(request: HttpRequest, limit: RateLimit) -> None:
    """
    Apply a limit to the request's client IP.

    Raises:
        HttpError 429: If the client is over the limit
    """
    try:
        hit(limit, get_client_ip(request, "unknown"))
    except RateLimitExceeded as e:
        raise HttpError(429, str(e)) from e
