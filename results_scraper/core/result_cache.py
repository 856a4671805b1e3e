"""
Result Cache
Short-TTL, URL-keyed, caller-owned cache of acquisition results
"""

import copy
import logging
import threading
from typing import Dict, Optional, Tuple

from .models import AcquisitionResult
from .timing import SYSTEM_CLOCK, Clock

logger = logging.getLogger(__name__)


class ResultCache:
    """
    Advisory in-memory cache for AcquisitionResults.

    A miss or an expired entry simply means "acquire again"; nothing ever
    waits on the cache. The owner decides its lifetime by holding the
    instance, there is no module-level cache.
    """

    def __init__(self, ttl: float = 30.0, clock: Clock = SYSTEM_CLOCK, max_entries: int = 256):
        """
        Initialize Result Cache

        Args:
            ttl: Time to live in seconds
            clock: Time source (inject a fake one in tests)
            max_entries: Oldest entries are evicted beyond this size
        """
        self.ttl = ttl
        self.clock = clock
        self.max_entries = max_entries
        self._entries: Dict[str, Tuple[float, AcquisitionResult]] = {}
        self._lock = threading.RLock()
        self.stats = {'hits': 0, 'misses': 0, 'expired': 0}

    def get(self, url: str) -> Optional[AcquisitionResult]:
        with self._lock:
            entry = self._entries.get(url)
            if entry is None:
                self.stats['misses'] += 1
                return None

            stored_at, result = entry
            if self._is_expired(stored_at):
                logger.debug(f"Cache entry expired: {url}")
                self._entries.pop(url, None)
                self.stats['expired'] += 1
                return None

            self.stats['hits'] += 1
        logger.info(f"Cache hit: {url}")
        hit = copy.copy(result)
        hit.cached = True
        return hit

    def set(self, url: str, result: AcquisitionResult) -> bool:
        """Store a result; empty results are never cached"""
        if not result.has_table:
            return False

        with self._lock:
            if len(self._entries) >= self.max_entries and url not in self._entries:
                oldest = min(self._entries, key=lambda k: self._entries[k][0])
                self._entries.pop(oldest, None)

            self._entries[url] = (self.clock.monotonic(), result)
        return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, url: str) -> bool:
        with self._lock:
            entry = self._entries.get(url)
        return entry is not None and not self._is_expired(entry[0])

    def _is_expired(self, stored_at: float) -> bool:
        return self.clock.monotonic() - stored_at >= self.ttl
