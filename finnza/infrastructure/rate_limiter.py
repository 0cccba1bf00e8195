"""Partner Rate Limiter — concurrency cap, TTL cache and 429 cooldown for partner APIs.

Invariants:
    - A fresh cache hit never touches the network (and never takes a permit)
    - At most max_concurrent requests in flight; a permit is always released
    - 429 responses retry with exponential backoff (initial_delay * 2**attempt) up to max_retries
    - After a 429, every call inside the cooldown window is served from cache/fallback
    - 401 responses never retry: a bad key will not fix itself
    - Degradation order on failure: stale cache entry, then fallback, then raise

Design Decisions:
    - Best-effort in-process limiter: single uvicorn worker per container, so no
      shared store; each worker protects its own share of the partner quota
    - Entries keep their own TTL; the scheduled sweep (infrastructure/scheduler.py)
      evicts by that TTL, not by the default
    - clock and sleep injectable: tests drive time without real waiting
    - Failures classified from httpx.HTTPStatusError: partner clients raise_for_status()
      and let the limiter decide
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, TypeVar

import httpx

from finnza.core.errors import FinnzaError, PartnerAPIError, RateLimitExceededError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TOO_MANY_REQUESTS = 429
_UNAUTHORIZED = 401


@dataclass
class _CacheEntry:
    value: Any
    stored_at: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return now - self.stored_at < self.ttl


class PartnerRateLimiter:
    """Guards outbound calls to one partner API."""

    def __init__(
        self,
        partner: str = "BomControle",
        max_concurrent: int = 3,
        default_ttl_seconds: float = 300,
        cooldown_seconds: float = 60,
        max_retries: int = 3,
        initial_delay_seconds: float = 1.0,
        acquire_timeout_seconds: float = 5.0,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.partner = partner
        self.max_concurrent = max_concurrent
        self.default_ttl_seconds = default_ttl_seconds
        self.cooldown_seconds = cooldown_seconds
        self.max_retries = max_retries
        self.initial_delay_seconds = initial_delay_seconds
        self.acquire_timeout_seconds = acquire_timeout_seconds
        self._clock = clock
        self._sleep = sleep
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._in_flight = 0
        self._cache: dict[str, _CacheEntry] = {}

        self.total_requests = 0
        self.cached_requests = 0
        self.rate_limited_requests = 0
        self.last_rate_limited_at: float | None = None

    # ─── Public API ─────────────────────────────────────────────

    async def execute(
        self,
        cache_key: str,
        request: Callable[[], Awaitable[T]],
        ttl_seconds: float | None = None,
        fallback: Callable[[], T] | None = None,
    ) -> T:
        """Run `request` under the limiter, serving from cache when possible."""
        ttl = ttl_seconds if ttl_seconds is not None else self.default_ttl_seconds
        now = self._clock()

        entry = self._cache.get(cache_key)
        if entry is not None and entry.is_fresh(now):
            self.cached_requests += 1
            logger.debug("Partner cache hit", extra={"cache_key": cache_key})
            return entry.value

        if self.in_cooldown(now):
            logger.warning(
                f"{self.partner} in rate-limit cooldown, serving degraded result",
                extra={"cache_key": cache_key, "partner": self.partner},
            )
            return self._degrade(
                cache_key, fallback, self._rate_limit_error(now),
            )

        try:
            await asyncio.wait_for(
                self._semaphore.acquire(), timeout=self.acquire_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Timed out waiting for a {self.partner} permit",
                extra={"cache_key": cache_key, "partner": self.partner},
            )
            return self._degrade(
                cache_key, fallback, RateLimitExceededError(self.partner),
            )

        self._in_flight += 1
        try:
            return await self._call_with_retry(cache_key, ttl, request, fallback)
        finally:
            self._in_flight -= 1
            self._semaphore.release()

    def in_cooldown(self, now: float | None = None) -> bool:
        if self.last_rate_limited_at is None:
            return False
        now = self._clock() if now is None else now
        return now - self.last_rate_limited_at < self.cooldown_seconds

    def cleanup_expired(self) -> int:
        """Evict entries older than their own TTL. Returns how many were removed."""
        now = self._clock()
        expired = [k for k, e in self._cache.items() if not e.is_fresh(now)]
        for key in expired:
            del self._cache[key]
        if expired:
            logger.info(
                f"Evicted {len(expired)} expired {self.partner} cache entries",
            )
        return len(expired)

    def clear_cache(self) -> int:
        removed = len(self._cache)
        self._cache.clear()
        logger.info(f"{self.partner} cache cleared ({removed} entries)")
        return removed

    def stats(self) -> dict:
        last = self.last_rate_limited_at
        return {
            "partner": self.partner,
            "total_requests": self.total_requests,
            "cached_requests": self.cached_requests,
            "rate_limited_requests": self.rate_limited_requests,
            "cache_size": len(self._cache),
            "available_permits": self.max_concurrent - self._in_flight,
            "in_cooldown": self.in_cooldown(),
            "last_rate_limited_at": (
                datetime.fromtimestamp(last, timezone.utc).isoformat()
                if last is not None else None
            ),
        }

    # ─── Internals ──────────────────────────────────────────────

    async def _call_with_retry(
        self,
        cache_key: str,
        ttl: float,
        request: Callable[[], Awaitable[T]],
        fallback: Callable[[], T] | None,
    ) -> T:
        for attempt in range(self.max_retries + 1):
            self.total_requests += 1
            try:
                value = await request()
            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code
                if status_code == _TOO_MANY_REQUESTS:
                    self._record_rate_limit()
                    if attempt < self.max_retries:
                        delay = self.initial_delay_seconds * (2 ** attempt)
                        logger.warning(
                            f"{self.partner} returned 429, retrying in {delay}s",
                            extra={"cache_key": cache_key, "attempt": attempt + 1},
                        )
                        await self._sleep(delay)
                        continue
                    return self._degrade(
                        cache_key, fallback, self._rate_limit_error(self._clock()),
                    )
                if status_code == _UNAUTHORIZED:
                    logger.error(
                        f"{self.partner} rejected the API key (401)",
                        extra={"cache_key": cache_key, "partner": self.partner},
                    )
                    if fallback is not None:
                        return fallback()
                    raise PartnerAPIError(
                        self.partner,
                        "Invalid API key. Check the configured credentials.",
                        status_code=status_code,
                    )
                logger.error(
                    f"{self.partner} HTTP {status_code}",
                    extra={"cache_key": cache_key, "partner": self.partner},
                )
                return self._degrade(
                    cache_key, fallback,
                    PartnerAPIError(
                        self.partner, f"HTTP {status_code}", status_code=status_code,
                    ),
                )
            except FinnzaError as e:
                return self._degrade(cache_key, fallback, e)
            except Exception as e:
                logger.error(
                    f"{self.partner} request failed: {e}",
                    extra={"cache_key": cache_key, "partner": self.partner},
                    exc_info=True,
                )
                return self._degrade(
                    cache_key, fallback, PartnerAPIError(self.partner, str(e)),
                )

            self._cache[cache_key] = _CacheEntry(value, self._clock(), ttl)
            return value

        raise RateLimitExceededError(self.partner)

    def _record_rate_limit(self) -> None:
        self.rate_limited_requests += 1
        self.last_rate_limited_at = self._clock()

    def _rate_limit_error(self, now: float) -> RateLimitExceededError:
        retry_after_ms = None
        if self.last_rate_limited_at is not None:
            remaining = self.cooldown_seconds - (now - self.last_rate_limited_at)
            retry_after_ms = max(int(remaining * 1000), 0)
        return RateLimitExceededError(self.partner, retry_after_ms=retry_after_ms)

    def _degrade(
        self,
        cache_key: str,
        fallback: Callable[[], T] | None,
        error: FinnzaError,
    ) -> T:
        entry = self._cache.get(cache_key)
        if entry is not None:
            logger.info(
                f"Serving stale {self.partner} cache entry",
                extra={"cache_key": cache_key},
            )
            return entry.value
        if fallback is not None:
            return fallback()
        raise error
