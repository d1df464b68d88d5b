"""Sliding-window request limiter for the analysis endpoints."""

import threading
import time
from typing import Any, Callable, Dict, List


class RateLimiter:
    """
    Allow at most `max_requests` calls per user within `window_seconds`.

    Refused calls are not recorded, so a blocked user regains access as soon
    as their oldest accepted call leaves the window.
    """

    def __init__(self, max_requests: int = 100, window_seconds: float = 60,
                 clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._requests: Dict[Any, List[float]] = {}
        self._lock = threading.Lock()

    def _recent(self, user_id: Any, now: float) -> List[float]:
        return [t for t in self._requests.get(user_id, []) if now - t < self.window_seconds]

    def is_allowed(self, user_id: Any) -> bool:
        with self._lock:
            now = self._clock()
            recent = self._recent(user_id, now)

            if len(recent) >= self.max_requests:
                self._requests[user_id] = recent
                return False

            recent.append(now)
            self._requests[user_id] = recent
            return True

    def remaining(self, user_id: Any) -> int:
        with self._lock:
            return max(0, self.max_requests - len(self._recent(user_id, self._clock())))

    def cleanup(self) -> None:
        """Forget users with no calls left in the window."""
        with self._lock:
            now = self._clock()
            for user_id in list(self._requests):
                recent = self._recent(user_id, now)
                if recent:
                    self._requests[user_id] = recent
                else:
                    del self._requests[user_id]
