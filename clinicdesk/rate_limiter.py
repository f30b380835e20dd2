"""
Fixed-window rate limiting for public and expensive endpoints
In-memory store by default, Redis store when counters must be shared across instances
"""

import logging
import math
import random
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Optional, Protocol

import redis
from fastapi import HTTPException, Request, status

from .config import RATE_LIMIT_BACKEND, REDIS_URL

logger = logging.getLogger(__name__)

DEFAULT_CLEANUP_PROBABILITY = 0.01


@dataclass(frozen=True)
class RateLimitPolicy:
    """Maximum admitted calls per fixed window"""

    limit: int
    window_seconds: int

    def __post_init__(self):
        if self.limit < 1:
            raise ValueError("Rate limit must allow at least one request")
        if self.window_seconds < 1:
            raise ValueError("Rate limit window must be at least one second")


# Pre-configured policies for common use cases
AI_API_POLICY = RateLimitPolicy(limit=5, window_seconds=60)  # Expensive LLM calls
API_POLICY = RateLimitPolicy(limit=30, window_seconds=60)  # Standard API calls
AUTH_POLICY = RateLimitPolicy(limit=5, window_seconds=300)  # Login and registration
PUBLIC_FORM_POLICY = RateLimitPolicy(limit=10, window_seconds=60)  # Booking and check-in


@dataclass
class RateLimitEntry:
    key: str
    count: int
    reset_at: float  # UNIX timestamp when the window expires


@dataclass(frozen=True)
class RateLimitResult:
    admitted: bool
    remaining: int
    reset_at: float

    def retry_after(self, now: Optional[float] = None) -> int:
        """Whole seconds until the window resets"""
        now = time.time() if now is None else now
        return max(0, math.ceil(self.reset_at - now))


class RateLimitStore(Protocol):
    """Storage for per-key window counters"""

    def hit(self, key: str, policy: RateLimitPolicy, now: float) -> RateLimitEntry:
        """Record one call for key and return the entry after counting it."""
        ...


class InMemoryRateLimitStore:
    """
    Process-local counters. State is lost on restart and not shared between
    workers, which is acceptable for an advisory throttle.

    Expired entries are swept opportunistically: each hit triggers a full
    sweep with probability ``cleanup_probability``, so no background timer is needed.
    """

    def __init__(
        self,
        cleanup_probability: float = DEFAULT_CLEANUP_PROBABILITY,
        rng: Optional[Callable[[], float]] = None,
    ):
        self.cleanup_probability = cleanup_probability
        self._rng = rng or random.random
        self._entries: dict[str, RateLimitEntry] = {}
        self._lock = Lock()

    def hit(self, key: str, policy: RateLimitPolicy, now: float) -> RateLimitEntry:
        with self._lock:
            if self._rng() < self.cleanup_probability:
                self._sweep(now)

            entry = self._entries.get(key)
            if entry is None or now >= entry.reset_at:
                # Expired windows are replaced, never mutated
                entry = RateLimitEntry(key=key, count=1, reset_at=now + policy.window_seconds)
                self._entries[key] = entry
            else:
                entry.count += 1

            return RateLimitEntry(key=entry.key, count=entry.count, reset_at=entry.reset_at)

    def get(self, key: str) -> Optional[RateLimitEntry]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            return RateLimitEntry(key=entry.key, count=entry.count, reset_at=entry.reset_at)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _sweep(self, now: float) -> None:
        """Remove expired entries. Must hold _lock."""
        expired_keys = [k for k, v in self._entries.items() if now >= v.reset_at]
        for k in expired_keys:
            del self._entries[k]

        if expired_keys:
            logger.debug(f"🧹 Cleaned up {len(expired_keys)} expired rate limit entries")


class RedisRateLimitStore:
    """
    Counters shared across instances. Window expiry is delegated to the
    Redis key TTL, so there is nothing to sweep.
    """

    def __init__(self, client: redis.Redis, key_prefix: str = "rate_limit"):
        self._client = client
        self._key_prefix = key_prefix

    def hit(self, key: str, policy: RateLimitPolicy, now: float) -> RateLimitEntry:
        redis_key = f"{self._key_prefix}:{key}"

        pipe = self._client.pipeline()
        pipe.incr(redis_key)
        pipe.ttl(redis_key)
        count, ttl = pipe.execute()

        # No TTL means INCR just created the key: start the window.
        # Not EXPIRE NX, which requires Redis >= 7.0
        if ttl is None or ttl < 0:
            self._client.expire(redis_key, policy.window_seconds)
            ttl = policy.window_seconds
        return RateLimitEntry(key=key, count=int(count), reset_at=now + ttl)


class RateLimiter:
    """Admits or rejects calls per key according to a policy"""

    def __init__(self, store: RateLimitStore, clock: Callable[[], float] = time.time):
        self.store = store
        self._clock = clock

    def check(self, key: str, policy: RateLimitPolicy) -> RateLimitResult:
        """
        Count one call for key and decide admission.

        Never raises. If the store fails the call is denied (fail-closed)
        and the caller answers as it would for any other denial.
        """
        now = self._clock()
        try:
            entry = self.store.hit(key, policy, now)
        except Exception as e:
            logger.error(f"❌ Rate limit check failed for {key}: {str(e)}")
            logger.warning("🔒 Denying request due to rate limiting error (fail-closed mode)")
            return RateLimitResult(admitted=False, remaining=0, reset_at=now + policy.window_seconds)

        admitted = entry.count <= policy.limit
        if not admitted:
            logger.warning(f"🚫 Rate limit EXCEEDED for {key} - {entry.count}/{policy.limit} requests")

        return RateLimitResult(
            admitted=admitted,
            remaining=max(0, policy.limit - entry.count),
            reset_at=entry.reset_at,
        )


def build_rate_limiter() -> RateLimiter:
    """Create the application's limiter from configuration"""
    if RATE_LIMIT_BACKEND == "redis":
        if not REDIS_URL:
            raise RuntimeError("RATE_LIMIT_BACKEND=redis requires REDIS_URL")
        logger.info("📡 Using Redis rate limit store")
        client = redis.from_url(
            REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        return RateLimiter(RedisRateLimitStore(client))

    logger.info("🧠 Using in-memory rate limit store")
    return RateLimiter(InMemoryRateLimitStore())


def get_rate_limiter(request: Request) -> RateLimiter:
    """FastAPI dependency returning the limiter owned by the application"""
    return request.app.state.rate_limiter


def get_client_ip(request: Request) -> str:
    """Get client IP from proxy headers, falling back to the socket peer"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    return (
        request.headers.get("x-real-ip")
        or request.headers.get("cf-connecting-ip")
        or (request.client.host if request.client else None)
        or "unknown"
    )


def get_rate_limit_headers(result: RateLimitResult, policy: RateLimitPolicy) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(policy.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(math.ceil(result.reset_at)),
    }


def enforce_rate_limit(
    request: Request, limiter: RateLimiter, policy: RateLimitPolicy, key_prefix: str
) -> RateLimitResult:
    """Check the limit for the calling IP and raise 429 when denied"""
    client_ip = get_client_ip(request)
    key = f"{key_prefix}:{client_ip}"
    logger.debug(f"🔍 Rate limit check for {key_prefix} - IP: {client_ip}")

    result = limiter.check(key, policy)
    headers = get_rate_limit_headers(result, policy)

    if not result.admitted:
        retry_after = result.retry_after()
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "message": "Too many requests. Please try again in a few minutes.",
                "retry_after": retry_after,
                "limit": policy.limit,
                "window_seconds": policy.window_seconds,
            },
            headers={**headers, "Retry-After": str(retry_after)},
        )

    # Picked up by RateLimitHeadersMiddleware
    request.state.rate_limit_headers = headers
    return result


def create_rate_limiter(policy: RateLimitPolicy, key_prefix: str = "rate_limit"):
    """
    Create a rate limiter dependency for a specific policy

    Example usage:
        booking_limit = create_rate_limiter(PUBLIC_FORM_POLICY, key_prefix="booking")

        @router.post("/{slug}/bookings")
        async def book(data: PublicBookingCreate, _: None = Depends(booking_limit)):
            ...
    """

    async def rate_limiter(request: Request):
        limiter = get_rate_limiter(request)
        enforce_rate_limit(request, limiter, policy, key_prefix)

    return rate_limiter
