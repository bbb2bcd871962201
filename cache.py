import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from config import CONFIG

logger = logging.getLogger(__name__)

NowFn = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry:
    response: str
    created_at: float


def normalize(text: str) -> str:
    return (text or "").strip().casefold()


class ResponseCache:
    """
    Short-lived replies keyed by (session, normalized message).

    Reads expire lazily: an entry older than the TTL is reported as missing
    even if the sweeper has not removed it yet. The sweeper runs as a
    background task between ``start()`` and ``stop()``.
    """

    def __init__(self,
                 ttl_seconds: float = CONFIG.CACHE_TTL_SECONDS,
                 sweep_seconds: float = CONFIG.CACHE_SWEEP_SECONDS,
                 now_fn: NowFn = time.time):
        self.ttl_seconds = ttl_seconds
        self.sweep_seconds = sweep_seconds
        self._now = now_fn
        self._entries: Dict[Tuple[str, str], CacheEntry] = {}
        self._sweep_task: Optional[asyncio.Task] = None

    def _key(self, session_id: str, text: str) -> Tuple[str, str]:
        return (session_id, normalize(text))

    def lookup(self, session_id: str, text: str) -> Optional[str]:
        entry = self._entries.get(self._key(session_id, text))
        if entry is None:
            return None
        if self._now() - entry.created_at < self.ttl_seconds:
            return entry.response
        return None

    def store(self, session_id: str, text: str, response: str) -> None:
        self._entries[self._key(session_id, text)] = CacheEntry(response, self._now())

    def sweep(self) -> int:
        now = self._now()
        expired = [k for k, e in self._entries.items() if now - e.created_at >= self.ttl_seconds]
        for k in expired:
            self._entries.pop(k, None)
        logger.info("Cache swept: %d expired entries removed, %d kept", len(expired), len(self._entries))
        return len(expired)

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_seconds)
            self.sweep()

    def start(self) -> None:
        if self._sweep_task is not None and not self._sweep_task.done():
            return
        self._sweep_task = asyncio.create_task(self._sweep_loop())

    async def stop(self) -> None:
        task, self._sweep_task = self._sweep_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    @property
    def running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
