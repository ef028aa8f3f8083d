import threading
import time
from typing import Callable, Dict, Iterable, Set, Tuple

DEFAULT_TTL_SECONDS = 3600


class TimedCache:
    """
    Keyed read cache with a coarse lifetime. Each entry remembers when it was
    stored and which tags it belongs to; ``invalidate(tag)`` drops every entry
    carrying that tag.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[object, float]] = {}
        self._tags: Dict[str, Set[str]] = {}
        # bumped by invalidate/clear so in-flight loads can tell they are stale
        self._generations: Dict[str, int] = {}
        self._epoch = 0
        self._lock = threading.Lock()

    def init_app(self, app):
        self.ttl_seconds = app.config.get("CACHE_TTL_SECONDS", DEFAULT_TTL_SECONDS)
        self.clear()

    def get(self, key: str):
        """Return (hit, value)."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False, None
            value, stored_at = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return False, None
            return True, value

    def set(self, key: str, value, tags: Iterable[str] = ()):
        with self._lock:
            self._store(key, value, tags)

    def _store(self, key, value, tags):
        self._entries[key] = (value, self._clock())
        for tag in tags:
            self._tags.setdefault(tag, set()).add(key)

    def _generation(self, tags) -> Tuple[int, ...]:
        return (self._epoch,) + tuple(self._generations.get(tag, 0) for tag in tags)

    def get_or_load(self, key: str, loader: Callable[[], object], tags: Iterable[str] = ()):
        tags = tuple(tags)
        hit, value = self.get(key)
        if hit:
            return value
        with self._lock:
            seen = self._generation(tags)
        value = loader()
        with self._lock:
            # a write landed while loading, hand the value back without keeping it
            if self._generation(tags) == seen:
                self._store(key, value, tags)
        return value

    def invalidate(self, tag: str):
        with self._lock:
            self._generations[tag] = self._generations.get(tag, 0) + 1
            for key in self._tags.pop(tag, set()):
                self._entries.pop(key, None)

    def clear(self):
        with self._lock:
            self._epoch += 1
            self._entries.clear()
            self._tags.clear()


cache = TimedCache()
