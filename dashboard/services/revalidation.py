# dashboard/services/revalidation.py
"""
Stale-marking and navigation after a successful write.

- PageCache keeps the data a listing view renders, keyed by the view's path.
  It is bounded: least recently used entries are evicted past
  PAGE_CACHE_MAX_ENTRIES, and entries expire after PAGE_CACHE_TTL seconds,
  which also caps how long another worker can serve a stale listing.
- revalidate_path() drops everything cached under a path so the next render
  goes back to the database.
- transfer_to() ends the current request with a redirect.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Hashable, Tuple

from flask import abort, current_app, redirect


DEFAULT_MAX_ENTRIES = 256
DEFAULT_TTL_SECONDS = 60.0


class PageCache:
    """In-process LRU store of view data, grouped by the path that renders it."""

    def __init__(
        self,
        app=None,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_entries = max_entries
        self.ttl = ttl
        self._clock = clock
        self._entries: "OrderedDict[Tuple[str, Hashable], Tuple[float, Any]]" = OrderedDict()
        self._lock = threading.Lock()
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        self.max_entries = int(app.config.get("PAGE_CACHE_MAX_ENTRIES", self.max_entries))
        self.ttl = float(app.config.get("PAGE_CACHE_TTL", self.ttl))
        app.extensions["page_cache"] = self

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _lookup(self, entry_key) -> Tuple[bool, Any]:
        item = self._entries.get(entry_key)
        if item is None:
            return False, None
        expires_at, value = item
        if expires_at <= self._clock():
            del self._entries[entry_key]
            return False, None
        self._entries.move_to_end(entry_key)
        return True, value

    def fetch(self, path: str, key: Hashable, loader: Callable[[], Any]) -> Any:
        entry_key = (path, key)
        with self._lock:
            hit, value = self._lookup(entry_key)
            if hit:
                return value

        # Load outside the lock; a concurrent miss just loads twice.
        value = loader()

        with self._lock:
            self._entries[entry_key] = (self._clock() + self.ttl, value)
            self._entries.move_to_end(entry_key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
        return value

    def revalidate(self, path: str) -> int:
        with self._lock:
            stale = [k for k in self._entries if k[0] == path]
            for k in stale:
                del self._entries[k]
        return len(stale)

    def is_cached(self, path: str, key: Hashable) -> bool:
        with self._lock:
            hit, _ = self._lookup((path, key))
            return hit

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


def revalidate_path(path: str) -> None:
    cache: PageCache = current_app.extensions["page_cache"]
    dropped = cache.revalidate(path)
    current_app.logger.debug("Revalidated %s (%d cached entries dropped)", path, dropped)


def transfer_to(path: str):
    """Abort the current request with a 302 to ``path``. Never returns."""
    abort(redirect(path))
