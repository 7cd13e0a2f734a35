import json
from typing import Any, Dict, Optional

import redis

from ...application.ports.search_cache import SearchCache


class RedisSearchCache(SearchCache):
    """Search results in Redis, keyed under a generation counter.

    Invalidation bumps the generation, so stale entries are never read
    again and simply expire. Writes go under the generation the caller read
    before touching the store, so a result computed across an invalidation
    lands in a generation nobody reads.
    """

    def __init__(self, url: str, prefix: str = "doctors:") -> None:
        self.client = redis.Redis.from_url(url)
        self.prefix = prefix

    def version(self) -> int:
        raw = self.client.get(f"{self.prefix}gen")
        return int(raw) if raw is not None else 0

    def _key(self, generation: int, key: str) -> str:
        return f"{self.prefix}{generation}:{key}"

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self.client.get(self._key(self.version(), key))
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Dict[str, Any], ttl_seconds: int, version: int) -> None:
        if version != self.version():
            return
        self.client.setex(self._key(version, key), ttl_seconds, json.dumps(value))

    def invalidate(self) -> None:
        self.client.incr(f"{self.prefix}gen", 1)
