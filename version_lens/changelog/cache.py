"""Time-bounded in-memory changelog cache."""

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


DEFAULT_TTL = 60 * 60


@dataclass(frozen=True)
class CacheEntry:
    """Cached changelog text and the moment it was stored."""

    content: str
    timestamp: float


class ChangelogCache:
    """Mapping of ``name@version`` to changelog text with lazy expiry.

    Entries are never evicted. An entry older than ``ttl`` reads as a miss
    and is replaced by the next :meth:`set` for the same key. Reads and
    writes are synchronous, so each one is atomic with respect to the
    event loop.
    """

    def __init__(self, ttl: float = DEFAULT_TTL, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    @staticmethod
    def make_key(name: str, version: str) -> str:
        return f"{name}@{version}"

    def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self.ttl:
            return None
        return entry.content

    def set(self, key: str, content: str) -> None:
        self._entries[key] = CacheEntry(content=content, timestamp=self._clock())

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
