import threading
import time
from typing import Any, Dict, Optional, Tuple

from ...application.ports.search_cache import SearchCache


class InMemorySearchCache(SearchCache):
    def __init__(self) -> None:
        self._store: Dict[str, Tuple[float, Dict[str, Any]]] = {}
        self._version = 0
        self._lock = threading.Lock()

    def version(self) -> int:
        with self._lock:
            return self._version

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            rec = self._store.get(key)
            if not rec:
                return None
            expires_at, value = rec
            if expires_at <= time.time():
                del self._store[key]
                return None
            return value

    def set(self, key: str, value: Dict[str, Any], ttl_seconds: int, version: int) -> None:
        with self._lock:
            if version != self._version:
                # computed from a snapshot older than the last invalidation
                return
            self._store[key] = (time.time() + ttl_seconds, value)

    def invalidate(self) -> None:
        with self._lock:
            self._version += 1
            self._store.clear()
