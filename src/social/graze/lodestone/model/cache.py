import asyncio
from collections import OrderedDict
from dataclasses import dataclass
import time
from typing import Callable, Optional, Tuple

from social.graze.lodestone.app.metrics import MetricsClient, NoOpMetricsClient


@dataclass(frozen=True)
class CacheEntry:
    data: bytes
    expires_at: float

    def expired(self, now: float) -> bool:
        return now > self.expires_at


class CacheStore:
    """
    Bounded in-memory store with least-recently-used eviction and per-entry expiry.

    Both ``get`` and ``put`` count as a use of the key. Expiry is checked lazily on
    ``get``: an expired entry reads as a miss but stays in place until it is
    overwritten or evicted. A TTL of zero means "never cache", so ``put`` ignores
    it and such keys always miss.

    All access goes through an asyncio lock so that concurrent resolution tasks
    see a consistent eviction order and the capacity bound always holds.
    """

    def __init__(
        self,
        name: str,
        capacity: int,
        clock: Callable[[], float] = time.monotonic,
        metrics_client: Optional[MetricsClient] = None,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.name = name
        self._capacity = capacity
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = asyncio.Lock()
        self._metrics_client = metrics_client or NoOpMetricsClient()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    async def get(self, key: str) -> Tuple[Optional[bytes], bool]:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
                if not entry.expired(self._clock()):
                    self._metrics_client.increment(
                        "lodestone.cache.hit", 1, tag_dict={"cache": self.name}
                    )
                    return entry.data, True

        self._metrics_client.increment(
            "lodestone.cache.miss", 1, tag_dict={"cache": self.name}
        )
        return None, False

    async def put(self, key: str, value: bytes, ttl: float) -> None:
        if ttl <= 0:
            return
        async with self._lock:
            entry = CacheEntry(data=value, expires_at=self._clock() + ttl)
            if key in self._entries:
                self._entries[key] = entry
                self._entries.move_to_end(key)
                return
            if len(self._entries) >= self._capacity:
                self._entries.popitem(last=False)
            self._entries[key] = entry
