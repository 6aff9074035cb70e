"""
In-process sliding-window rate limiting.

Limiters are named: ``llm`` guards endpoints that call the LLM and
``standard`` everything else. Each caller is tracked per limiter by an
identifier (``user:<id>`` or ``ip:<addr>``). State lives in memory, so
limits apply per worker process.
"""

from __future__ import annotations

import threading
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Optional, Tuple

from fastapi import Request

from transparent_trust.core.logging_config import get_logger
from transparent_trust.server.core.config import RateLimitConfig, settings

logger = get_logger(__name__)


@dataclass(frozen=True)
class RateLimitRule:
    requests: int
    window_seconds: int


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of one rate limit check."""

    success: bool
    limit: int
    remaining: int
    reset_at: float

    def retry_after(self, now: Optional[float] = None) -> int:
        """Whole seconds until the oldest request leaves the window."""
        now = time.time() if now is None else now
        return max(1, int(self.reset_at - now + 0.999))


def rules_from_config(config: RateLimitConfig) -> Dict[str, RateLimitRule]:
    return {
        "llm": RateLimitRule(config.llm_requests, config.llm_window_seconds),
        "standard": RateLimitRule(config.standard_requests, config.standard_window_seconds),
    }


class SlidingWindowRateLimiter:
    """
    Sliding-window log limiter.

    Every accepted request's timestamp is kept until it falls out of the
    window; a request is accepted while fewer than ``requests`` timestamps
    remain.
    """

    def __init__(self, rules: Dict[str, RateLimitRule], clock: Callable[[], float] = time.time):
        self.rules = rules
        self._clock = clock
        self._hits: Dict[Tuple[str, str], Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def check(self, identifier: str, name: str = "standard") -> RateLimitResult:
        rule = self.rules.get(name) or self.rules["standard"]
        now = self._clock()
        window_start = now - rule.window_seconds

        with self._lock:
            hits = self._hits[(name, identifier)]
            while hits and hits[0] <= window_start:
                hits.popleft()

            if len(hits) >= rule.requests:
                reset_at = hits[0] + rule.window_seconds
                return RateLimitResult(success=False, limit=rule.requests, remaining=0, reset_at=reset_at)

            hits.append(now)
            reset_at = hits[0] + rule.window_seconds
            return RateLimitResult(
                success=True,
                limit=rule.requests,
                remaining=rule.requests - len(hits),
                reset_at=reset_at,
            )

    def reset(self, identifier: Optional[str] = None) -> None:
        """Forget the recorded requests of ``identifier``, or of everyone."""
        with self._lock:
            if identifier is None:
                self._hits.clear()
                return
            for key in [k for k in self._hits if k[1] == identifier]:
                del self._hits[key]


rate_limiter = SlidingWindowRateLimiter(rules_from_config(settings.rate_limit))


def check_rate_limit(identifier: str, name: str = "standard") -> RateLimitResult:
    """Check (and record) one request of ``identifier`` against the named limiter."""
    result = rate_limiter.check(identifier, name)
    if not result.success:
        logger.warning(f"Rate limit {name!r} exceeded for {identifier}")
    return result


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


def get_rate_limit_identifier(request: Request, user_id: Optional[str] = None) -> str:
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_client_ip(request)}"
