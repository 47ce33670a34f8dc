"""Monotonic request tokens for discarding late async results.

Each load or analysis cycle is issued a token; when its result arrives
the caller checks the token is still current before applying anything.
A newer request, or an explicit release (a view being closed), makes
older tokens stale. In-flight work is never cancelled, only ignored.
"""

from collections import defaultdict
from typing import Dict, Hashable


class RequestTokens:
    """Per-key monotonically increasing tokens."""

    def __init__(self) -> None:
        self._counter = 0
        self._current: Dict[Hashable, int] = defaultdict(int)

    def issue(self, key: Hashable = None) -> int:
        # One counter across keys keeps tokens unique even after release()
        self._counter += 1
        self._current[key] = self._counter
        return self._counter

    def is_current(self, token: int, key: Hashable = None) -> bool:
        return self._current.get(key) == token

    def release(self, key: Hashable = None) -> None:
        """Invalidate whatever token is outstanding for ``key``."""
        self._counter += 1
        self._current[key] = self._counter

    def release_all(self) -> None:
        for key in list(self._current):
            self.release(key)
