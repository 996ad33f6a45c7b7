"""Explicit time-to-live cache.

One instance per Flask app (see create_app), stored under
``app.extensions["cache"]``. Entries expire after their TTL and can be
dropped early with invalidate(), e.g. right after settings are saved.
"""

import logging
import threading
import time

logger = logging.getLogger(__name__)


class TTLCache:
    def __init__(self, default_ttl=60, clock=time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries = {}
        self._lock = threading.Lock()

    def get(self, key, default=None):
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return default
            return value

    def set(self, key, value, ttl=None):
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl)

    def get_or_load(self, key, loader, ttl=None):
        """Return the cached value for key, calling loader() on a miss."""
        missing = object()
        value = self.get(key, missing)
        if value is missing:
            logger.debug(f"Cache miss: {key}")
            value = loader()
            self.set(key, value, ttl)
        return value

    def invalidate(self, key=None):
        """Drop one key, or everything when key is None."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def __contains__(self, key):
        missing = object()
        return self.get(key, missing) is not missing
