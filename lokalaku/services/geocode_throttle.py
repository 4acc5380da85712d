# lokalaku/services/geocode_throttle.py
# Rate bound for reverse geocoding (shared through Redis when enabled, per process otherwise).

import asyncio
import time
from typing import Callable, Optional

import structlog
from redis.asyncio import Redis

logger = structlog.get_logger(__name__)

class GeocodeThrottle:
    """
    At most one lookup per ``min_interval_ms``.

    With a Redis client the window is shared by all workers and fail-closed
    (a Redis error denies the slot, the caller then uses its fallback label).
    Without one, a last-call timestamp guarded by an asyncio.Lock bounds this
    process only.
    """

    KEY = "geocoder:reverse:slot"

    def __init__(
        self,
        redis_client: Optional[Redis] = None,
        min_interval_ms: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.redis_client: Optional[Redis] = redis_client
        self.min_interval_ms = min_interval_ms
        self._clock = clock
        self._lock = asyncio.Lock()
        self._last_granted: Optional[float] = None

    async def acquire(self) -> bool:
        if self.redis_client is None:
            return await self._acquire_local()
        try:
            # SET NX PX: only the first caller inside the window gets the slot
            granted = await self.redis_client.set(self.KEY, "1", nx=True, px=self.min_interval_ms)
            return bool(granted)
        except Exception as e:
            logger.error("geocode_throttle_error", error=str(e), key=self.KEY)
            return False

    async def _acquire_local(self) -> bool:
        async with self._lock:
            now = self._clock()
            if self._last_granted is not None and (now - self._last_granted) * 1000 < self.min_interval_ms:
                return False
            self._last_granted = now
            return True

    @classmethod
    def from_url(cls, url: Optional[str], min_interval_ms: int = 1000) -> "GeocodeThrottle":
        if not url:
            raise ValueError("REDIS_URL is not set in the environment")
        return cls(Redis.from_url(url), min_interval_ms=min_interval_ms)
