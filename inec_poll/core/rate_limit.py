"""
In-memory fixed-window rate limiter.

Each (identity, action) pair gets a counter that resets at a fixed point in
time. The limiter is an explicit component: the application creates one,
starts its cleanup loop on startup, stops it on shutdown, and hands it to
request handlers through a dependency. The clock is injectable so tests can
move time forward without sleeping.

Design decisions:
- Plain dict keyed by "identity:action" holding {count, reset_at}
- threading.Lock around every read-modify-write so concurrent requests on
  the same key never observe a half-applied update (works from sync and async handlers)
- Periodic sweep drops expired windows; if the store is still over
  max_entries afterwards, the entries that reset soonest are evicted first
"""
import asyncio
import contextlib
import math
import threading
import time
from typing import Callable, Dict, Mapping, Optional

from inec_poll.core.constants import RATE_LIMITS
from inec_poll.core.exceptions import RateLimited
from inec_poll.core.logging_config import get_logger

logger = get_logger(__name__)


def get_client_ip(request) -> str:
    """Get client IP for rate limiting, considering proxies."""
    # Check X-Forwarded-For header (from reverse proxies)
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    # Fall back to direct connection IP
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class _Window:
    __slots__ = ("count", "reset_at")

    def __init__(self, count: int, reset_at: float):
        self.count = count
        self.reset_at = reset_at


class RateLimiter:
    """
    Fixed-window request counter with bounded memory.

    Features:
    - Independent windows per action category (create_poll, vote, ...)
    - Retry-after hint derived from the time left in the current window
    - Expired-window sweep on a configurable interval
    - Size cap with eviction by earliest reset time
    """

    def __init__(
        self,
        window_seconds: float = 60,
        max_entries: int = 10000,
        cleanup_interval: float = 300,
        limits: Optional[Mapping[str, int]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the rate limiter.

        Args:
            window_seconds: Length of each fixed window
            max_entries: Maximum number of keys kept after a sweep
            cleanup_interval: Seconds between background sweeps
            limits: Mapping of action -> requests allowed per window
            clock: Monotonic time source in seconds
        """
        self._store: Dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._window = window_seconds
        self._max_entries = max_entries
        self._cleanup_interval = cleanup_interval
        self._limits = dict(limits if limits is not None else RATE_LIMITS)
        self._clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def window_seconds(self) -> float:
        return self._window

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def limit_for(self, action: str) -> int:
        """Configured ceiling for an action, falling back to the general limit."""
        return self._limits.get(action, self._limits["general"])

    def check_and_consume(self, key: str, limit: int) -> bool:
        """
        Count one request against ``key`` and report whether it is allowed.

        Returns:
            True if the request fits in the current window, False once
            ``limit`` requests have already been counted in it
        """
        now = self._clock()
        with self._lock:
            record = self._store.get(key)
            if record is None or now >= record.reset_at:
                self._store[key] = _Window(1, now + self._window)
                return True

            if record.count >= limit:
                return False

            record.count += 1
            return True

    def retry_after(self, key: str) -> int:
        """Whole seconds until the key's window resets (0 if it has no window)."""
        now = self._clock()
        with self._lock:
            record = self._store.get(key)
            if record is None or now >= record.reset_at:
                return 0
            return max(1, math.ceil(record.reset_at - now))

    def hit(self, identity: str, action: str) -> None:
        """
        Consume one request for ``identity`` performing ``action``.

        Raises:
            RateLimited: If the action's ceiling is reached for this window
        """
        key = f"{identity}:{action}"
        if not self.check_and_consume(key, self.limit_for(action)):
            retry_after = self.retry_after(key)
            logger.warning(
                "rate_limit_exceeded",
                identity=identity,
                action=action,
                retry_after=retry_after,
            )
            raise RateLimited(retry_after=retry_after)

    def sweep(self) -> int:
        """
        Drop expired windows, then enforce the size cap.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        with self._lock:
            expired = [key for key, record in self._store.items() if now >= record.reset_at]
            for key in expired:
                del self._store[key]

            evicted = 0
            overflow = len(self._store) - self._max_entries
            if overflow > 0:
                oldest = sorted(self._store.items(), key=lambda item: item[1].reset_at)
                for key, _ in oldest[:overflow]:
                    del self._store[key]
                evicted = overflow

        if expired or evicted:
            logger.debug("rate_limit_sweep", expired=len(expired), evicted=evicted)
        return len(expired) + evicted

    def reset(self) -> None:
        """Forget every window."""
        with self._lock:
            self._store.clear()

    def get_stats(self) -> Dict[str, float]:
        with self._lock:
            return {
                "size": len(self._store),
                "max_entries": self._max_entries,
                "window_seconds": self._window,
            }

    async def _cleanup_loop(self) -> None:
        while True:
            await asyncio.sleep(self._cleanup_interval)
            self.sweep()

    def start(self) -> None:
        """Start the periodic sweep. Must be called from a running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._cleanup_loop())
        logger.info("rate_limiter_started", cleanup_interval=self._cleanup_interval)

    async def stop(self) -> None:
        """Cancel the periodic sweep and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("rate_limiter_stopped")
