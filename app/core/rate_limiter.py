"""
In-memory sliding-window rate limiter for the credential endpoints.

Limits are per process. Behind several workers each one counts on its own.
"""

import time
import logging
from collections import defaultdict
from dataclasses import dataclass
from threading import Lock
from typing import Dict, List, Optional, Sequence, Tuple

from fastapi import Request

from app.core.config import Settings, get_settings
from app.core.errors import AuthReason, RateLimitedError

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Configuration for one limit type."""
    max_requests: int
    window_seconds: int


class RateLimiter:
    """Thread-safe sliding-window counter keyed by ``limit_type:identifier``."""

    def __init__(self, configs: Dict[str, RateLimitConfig]):
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._lock = Lock()
        self._last_sweep = 0.0
        self.configs = configs

    @classmethod
    def from_settings(cls, settings: Settings) -> "RateLimiter":
        window = settings.rate_limit_window_seconds
        return cls({
            "login_ip": RateLimitConfig(settings.login_rate_limit, window),
            "signup_ip": RateLimitConfig(settings.signup_rate_limit, window),
        })

    def _prune(self, key: str, window_seconds: int, now: float) -> List[float]:
        """Drop timestamps outside the window; keys with none left are removed."""
        cutoff = now - window_seconds
        recent = [ts for ts in self._requests.get(key, ()) if ts > cutoff]
        if recent:
            self._requests[key] = recent
        else:
            self._requests.pop(key, None)
        return recent

    def _sweep(self, now: float) -> None:
        """Prune every key, so idle clients do not pile up."""
        for key in list(self._requests):
            config = self.configs.get(key.split(":", 1)[0])
            if config is not None:
                self._prune(key, config.window_seconds, now)
        self._last_sweep = now

    def is_allowed(self, limit_type: str, identifier: str) -> Tuple[bool, int]:
        """
        Record an attempt and report whether it is within the limit.

        Returns:
            Tuple of (is_allowed, retry_after_seconds)
        """
        if limit_type not in self.configs:
            logger.warning(f"Unknown rate limit type: {limit_type}")
            return True, 0

        config = self.configs[limit_type]
        key = f"{limit_type}:{identifier}"

        with self._lock:
            now = time.time()
            if now - self._last_sweep >= config.window_seconds:
                self._sweep(now)
            recent = self._prune(key, config.window_seconds, now)

            if len(recent) >= config.max_requests:
                oldest = min(recent)
                retry_after = int(oldest + config.window_seconds - now) + 1
                return False, max(retry_after, 1)

            self._requests[key].append(now)
            return True, 0

    def reset(self, limit_type: str, identifier: str) -> None:
        """Forget attempts for one key (e.g. after a successful login)."""
        with self._lock:
            self._requests.pop(f"{limit_type}:{identifier}", None)

    def clear(self) -> None:
        with self._lock:
            self._requests.clear()


rate_limiter = RateLimiter.from_settings(get_settings())


def get_client_ip(request: Request, trusted_proxies: Optional[Sequence[str]] = None) -> str:
    """
    Extract the client IP.

    X-Forwarded-For / X-Real-IP are honoured only when the direct peer is a
    configured trusted proxy; otherwise anyone could pick their own bucket.
    """
    if trusted_proxies is None:
        trusted_proxies = get_settings().trusted_proxies_list
    peer = request.client.host if request.client else None

    if peer is None or peer not in trusted_proxies:
        return peer or "unknown"

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    return peer


def check_rate_limit(limit_type: str, identifier: str) -> None:
    """Raise 429 when ``identifier`` is over the ``limit_type`` limit."""
    allowed, retry_after = rate_limiter.is_allowed(limit_type, identifier)
    if not allowed:
        logger.warning(f"Rate limit exceeded for {limit_type}: {identifier[:20]}")
        raise RateLimitedError(
            AuthReason.TOO_MANY_REQUESTS,
            f"Too many requests. Please try again in {retry_after} seconds.",
            headers={"Retry-After": str(retry_after)},
        )
