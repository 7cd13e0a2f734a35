from typing import Any, Dict, Optional, Protocol


class SearchCache(Protocol):
    def version(self) -> int:
        """Current invalidation counter; read it before reading the store."""
        ...

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        ...

    def set(self, key: str, value: Dict[str, Any], ttl_seconds: int, version: int) -> None:
        """Store ``value`` unless the cache was invalidated since ``version``."""
        ...

    def invalidate(self) -> None:
        ...
