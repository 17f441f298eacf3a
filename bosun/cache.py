"""
Short-lived metadata cache for derived command data (help text, groupings).

Entries expire two ways
- lazily: every read checks the entry's own deadline, so a caller never sees a
  logically stale value even if no sweep has run yet;
- eagerly: a daemon timer calls cleanup() every `interval` seconds.

The sweep never blocks a reader for longer than a dictionary operation; the
lock only guards the mapping itself.
"""
import logging
import threading
import time

from .utils import Unset, coalesce, mirror

logger = logging.getLogger(__name__)


class CacheEntry:
    __slots__ = ("value", "inserted_at", "ttl")

    def __init__(self, value, inserted_at, ttl):
        self.value = value
        self.inserted_at = inserted_at
        self.ttl = ttl

    def __repr__(self):
        return "cache-entry(value=%r, inserted_at=%r, ttl=%r)" % (self.value, self.inserted_at, self.ttl)

    def expired(self, now):
        return now - self.inserted_at >= self.ttl


class MetadataCache:
    """
    In-memory key/value store with per-entry TTL (seconds).

    Parameters
    - ttl: default time-to-live for set() without an explicit ttl.
    - interval: period of the background sweep; None disables it.
    - clock: zero-argument callable returning seconds (time.monotonic by default);
      injectable so tests can move time forward deterministically.

    A disabled cache always misses and stores nothing.
    """

    enabled = mirror("enabled")

    def __init__(self, *, ttl=5.0, interval=30.0, clock=Unset):
        if not isinstance(ttl, int | float) or ttl <= 0:
            raise ValueError("cache 'ttl' must be a positive number")
        if interval is not None and (not isinstance(interval, int | float) or interval <= 0):
            raise ValueError("cache 'interval' must be a positive number or None")
        self._ttl = ttl
        self._interval = interval
        self._clock = coalesce(clock, time.monotonic)
        self._entries = {}
        self._lock = threading.Lock()
        self._timer = None
        self._enabled = True
        self._hits = 0
        self._misses = 0
        if interval is not None:
            self.start()

    def __repr__(self):
        return "metadata-cache(size=%d, enabled=%r, ttl=%r)" % (len(self._entries), self._enabled, self._ttl)

    def __len__(self):
        return len(self._entries)

    def get(self, key, default=None):
        if not self._enabled:
            self._misses += 1
            return default

        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.expired(self._clock()):
                del self._entries[key]
                entry = None

        if entry is None:
            self._misses += 1
            return default

        self._hits += 1
        return entry.value

    def set(self, key, value, ttl=None):
        if ttl is not None and (not isinstance(ttl, int | float) or ttl <= 0):
            raise ValueError("cache 'ttl' must be a positive number")
        if not self._enabled:
            return
        with self._lock:
            self._entries[key] = CacheEntry(value, self._clock(), ttl if ttl is not None else self._ttl)

    def has(self, key):
        if not self._enabled:
            return False
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            if entry.expired(self._clock()):
                del self._entries[key]
                return False
            return True

    def delete(self, key):
        with self._lock:
            self._entries.pop(key, None)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def keys(self):
        with self._lock:
            return list(self._entries)

    def enable(self):
        self._enabled = True

    def disable(self):
        self._enabled = False
        self.clear()

    def stats(self):
        return {
            "size": len(self._entries),
            "enabled": self._enabled,
            "hits": self._hits,
            "misses": self._misses,
        }

    def reset_stats(self):
        self._hits = 0
        self._misses = 0

    def cleanup(self):
        """
        Drop every expired entry; returns how many were removed.
        """
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.expired(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("cache sweep removed %d expired entries", len(expired))
        return len(expired)

    def _sweep(self):
        self.cleanup()
        with self._lock:
            if self._timer is None:
                return
            self._timer = self._schedule()

    def _schedule(self):
        timer = threading.Timer(self._interval, self._sweep)
        timer.daemon = True
        timer.start()
        return timer

    def start(self):
        """
        Start the periodic sweep (no-op when already running or interval is None).
        """
        if self._interval is None:
            return
        with self._lock:
            if self._timer is not None:
                return
            self._timer = self._schedule()

    def stop(self):
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def destroy(self):
        self.stop()
        self.clear()
        self.reset_stats()


__all__ = (
    "CacheEntry",
    "MetadataCache",
)
