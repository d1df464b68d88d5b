"""In-memory TTL cache for analysis results, keyed by user, analysis type and params."""

import json
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class AnalysisCache:
    """
    Expiring cache for computed analyses.

    Entries live for `ttl_seconds`. Expired entries are dropped when read,
    and swept in bulk once the cache grows past `max_entries`. Safe to share
    between request threads.
    """

    def __init__(self, ttl_seconds: float = 300, max_entries: int = 1000,
                 clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def generate_key(user_id: Any, analysis_type: str, params: Optional[Dict[str, Any]] = None) -> str:
        param_string = json.dumps(params or {}, sort_keys=True, default=str)
        return f'{user_id}-{analysis_type}-{param_string}'

    def get(self, user_id: Any, analysis_type: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        key = self.generate_key(user_id, analysis_type, params)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            value, stored_at = entry
            if self._clock() - stored_at < self.ttl_seconds:
                return value

            del self._entries[key]
            return None

    def set(self, user_id: Any, analysis_type: str, params: Optional[Dict[str, Any]], value: Any) -> None:
        key = self.generate_key(user_id, analysis_type, params)
        with self._lock:
            self._entries[key] = (value, self._clock())
            if len(self._entries) > self.max_entries:
                self._sweep()

    def cleanup(self) -> int:
        """Remove expired entries and return how many were removed."""
        with self._lock:
            return self._sweep()

    def _sweep(self) -> int:
        now = self._clock()
        expired = [key for key, (_, stored_at) in self._entries.items()
                   if now - stored_at >= self.ttl_seconds]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug('Analysis cache swept %d expired entries', len(expired))
        return len(expired)

    def clear(self, user_id: Any) -> int:
        """Drop every entry belonging to `user_id`."""
        prefix = f'{user_id}-'
        with self._lock:
            keys = [key for key in self._entries if key.startswith(prefix)]
            for key in keys:
                del self._entries[key]
            return len(keys)

    @property
    def size(self) -> int:
        return len(self._entries)
