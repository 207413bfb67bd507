import time
from typing import Callable, Optional
import threading

from takemeto75.config import settings
from takemeto75.models import TripPackage

class PackageCache:
    """
    Assembled packages kept by id for a limited time, so a booking request
    can refer to a package it was shown earlier.
    """

    def __init__(self, ttl_seconds: Optional[int] = None, clock: Callable[[], float] = time.time):
        self._store = {}
        self._lock = threading.Lock()
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.PACKAGE_TTL_SECONDS
        self._clock = clock

    def get(self, package_id: str) -> Optional[TripPackage]:
        with self._lock:
            entry = self._store.get(package_id)
            if entry is None:
                return None
            package, expire_at = entry
            if self._clock() < expire_at:
                return package
            del self._store[package_id]
        return None

    def put(self, package: TripPackage):
        with self._lock:
            self._purge()
            self._store[package.id] = (package, self._clock() + self._ttl)

    def _purge(self):
        now = self._clock()
        expired = [key for key, (_, expire_at) in self._store.items() if expire_at <= now]
        for key in expired:
            del self._store[key]

    def clear(self):
        with self._lock:
            self._store.clear()

# Global cache instance
package_cache = PackageCache()
