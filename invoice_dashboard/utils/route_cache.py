"""
In-process cache for rendered dashboard routes.

Read endpoints store their response payload under the route path plus a
variant key (user, query, page). Form actions call revalidate_path() after a
successful write so the next read of that route goes back to the database.

Each path keeps at most ``max_entries`` variants; once full, the least
recently used variant is dropped.

Single-process only: each uvicorn worker holds its own copy, so a write
served by one worker does not evict entries held by another.
"""

import threading
from collections import OrderedDict
from typing import Any, Dict, Hashable, Optional

from invoice_dashboard.config import settings
from invoice_dashboard.utils.logging import get_logger

logger = get_logger(__name__)


class RouteCache:
    """Mapping of ``path -> {variant_key -> payload}`` guarded by a lock."""

    def __init__(self, max_entries: int = 256) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._entries: Dict[str, "OrderedDict[Hashable, Any]"] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _normalize(path: str) -> str:
        path = path.split("?", 1)[0]
        if len(path) > 1:
            path = path.rstrip("/")
        return path or "/"

    def get(self, path: str, key: Hashable) -> Optional[Any]:
        with self._lock:
            variants = self._entries.get(self._normalize(path))
            if variants is None or key not in variants:
                return None
            variants.move_to_end(key)
            return variants[key]

    def set(self, path: str, key: Hashable, value: Any) -> None:
        with self._lock:
            variants = self._entries.setdefault(self._normalize(path), OrderedDict())
            variants[key] = value
            variants.move_to_end(key)
            while len(variants) > self.max_entries:
                dropped, _ = variants.popitem(last=False)
                logger.debug(f"Route cache full for {path}: dropped variant {dropped!r}")

    def revalidate_path(self, path: str) -> int:
        """
        Drop every cached variant of ``path``.

        Returns:
            Number of entries evicted.
        """
        with self._lock:
            evicted = self._entries.pop(self._normalize(path), {})
        logger.debug(f"Revalidated {path}: evicted {len(evicted)} cached variants")
        return len(evicted)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


route_cache = RouteCache(max_entries=settings.ROUTE_CACHE_MAX_ENTRIES)


def revalidate_path(path: str) -> int:
    """Invalidate ``path`` in the process-wide route cache."""
    return route_cache.revalidate_path(path)
