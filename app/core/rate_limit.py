"""
Per-client token-bucket rate limiting for public write endpoints.

One bucket per client address, created lazily at full burst capacity and
evicted by a background sweep once the client has been idle long enough.
All state lives behind a single lock owned by the limiter instance.
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import HTTPException, Request, status

logger = logging.getLogger(__name__)

DEFAULT_IDLE_TTL_SEC = 180.0
DEFAULT_SWEEP_INTERVAL_SEC = 60.0

RATE_LIMIT_EXCEEDED_DETAIL = "Rate limit exceeded. Please try again later."


@dataclass
class TokenBucket:
    """Capped pool of permits refilled continuously at `rate` per second."""

    rate: float
    capacity: float
    tokens: float
    updated_at: float

    def take(self, now: float) -> bool:
        elapsed = max(0.0, now - self.updated_at)
        self.tokens = min(self.capacity, self.tokens + elapsed * self.rate)
        self.updated_at = now
        if self.tokens >= 1.0:
            self.tokens -= 1.0
            return True
        return False


@dataclass
class _ClientEntry:
    bucket: TokenBucket
    last_seen: float


class ClientRateLimiter:
    """
    Token bucket per client address with idle eviction.

    A daemon thread calls sweep() every sweep_interval seconds until close()
    is called. Pass start_sweeper=False to drive sweep() manually.
    """

    def __init__(
        self,
        rate: float,
        burst: int,
        idle_ttl: float = DEFAULT_IDLE_TTL_SEC,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL_SEC,
        clock: Callable[[], float] = time.monotonic,
        start_sweeper: bool = True,
    ) -> None:
        if rate <= 0:
            raise ValueError("rate must be positive")
        if burst < 1:
            raise ValueError("burst must be at least 1")
        self.rate = rate
        self.burst = burst
        self.idle_ttl = idle_ttl
        self.sweep_interval = sweep_interval
        self._clock = clock
        self._clients: dict[str, _ClientEntry] = {}
        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._sweeper: threading.Thread | None = None
        if start_sweeper:
            self._sweeper = threading.Thread(
                target=self._sweep_loop,
                name="rate-limit-sweeper",
                daemon=True,
            )
            self._sweeper.start()

    def allow(self, address: str) -> bool:
        """Withdraw one token for address; False when its bucket is empty."""
        with self._lock:
            now = self._clock()
            entry = self._clients.get(address)
            if entry is None:
                entry = _ClientEntry(
                    bucket=TokenBucket(
                        rate=self.rate,
                        capacity=float(self.burst),
                        tokens=float(self.burst),
                        updated_at=now,
                    ),
                    last_seen=now,
                )
                self._clients[address] = entry
            else:
                entry.last_seen = now
            return entry.bucket.take(now)

    def sweep(self) -> int:
        """Evict clients idle for longer than idle_ttl. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            stale = [
                address
                for address, entry in self._clients.items()
                if now - entry.last_seen > self.idle_ttl
            ]
            for address in stale:
                del self._clients[address]
        if stale:
            logger.debug("Rate limiter sweep evicted %s idle clients", len(stale))
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    def __contains__(self, address: object) -> bool:
        with self._lock:
            return address in self._clients

    def close(self, timeout: float | None = 5.0) -> None:
        """Stop the background sweep. Safe to call more than once."""
        self._stopped.set()
        if self._sweeper is not None and self._sweeper is not threading.current_thread():
            self._sweeper.join(timeout)

    def _sweep_loop(self) -> None:
        while not self._stopped.wait(self.sweep_interval):
            try:
                self.sweep()
            except Exception:
                logger.exception("Rate limiter sweep failed")


def client_address(request: Request) -> str:
    """Client key for rate limiting; honours X-Forwarded-For only when trusted."""
    settings = request.app.state.settings
    if settings.TRUST_FORWARDED_FOR:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client is None:
        return "unknown"
    return request.client.host


def enforce_rate_limit(request: Request) -> None:
    """Dependency: reject with 429 when the caller's bucket is empty."""
    limiter: ClientRateLimiter = request.app.state.rate_limiter
    address = client_address(request)
    if not limiter.allow(address):
        logger.warning("Rate limit exceeded", extra={"client_address": address})
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=RATE_LIMIT_EXCEEDED_DETAIL,
        )
