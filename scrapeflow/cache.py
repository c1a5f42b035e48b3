from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

from cachetools import TTLCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheStats:
    entry_count: int = 0
    hits: int = 0
    misses: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


def cache_key(url: str, params: Optional[Dict[str, Any]] = None) -> str:
    """Key a page by URL plus its query params in sorted order."""
    if not params:
        return url
    return f"{url}?{urlencode(sorted((str(k), str(v)) for k, v in params.items()))}"


class HtmlCache:
    """In-memory page cache bounded by entry count and time-to-live.

    Entries older than ttl_seconds are never returned; once max_entries
    is reached the least recently used entry makes room for a new one."""

    def __init__(
        self,
        max_entries: int = 1000,
        ttl_seconds: float = 3600,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: TTLCache = TTLCache(maxsize=max(1, max_entries), ttl=ttl_seconds, timer=timer)
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get_html(self, url: str) -> Optional[str]:
        with self._lock:
            body = self._entries.get(url)
            if body is None:
                self._misses += 1
            else:
                self._hits += 1
        if body is not None:
            logger.debug("Cache hit for %s", url)
        return body

    def set_html(self, url: str, html: str) -> None:
        with self._lock:
            self._entries[url] = html
        logger.debug("Cache set for %s", url)

    def remove_html(self, url: str) -> None:
        with self._lock:
            self._entries.pop(url, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
        logger.info("Cache cleared")

    def stats(self) -> CacheStats:
        with self._lock:
            self._entries.expire()
            return CacheStats(entry_count=len(self._entries), hits=self._hits, misses=self._misses)
