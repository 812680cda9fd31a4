from __future__ import annotations

import threading

from .models import ProviderIndex


class CacheStore:
    """Holds the single published :class:`ProviderIndex`.

    Readers take a snapshot without locking and work on it for the whole
    request; the index is never mutated, only replaced by :meth:`publish`.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._index = ProviderIndex()

    def snapshot(self) -> ProviderIndex:
        return self._index

    def publish(self, index: ProviderIndex) -> ProviderIndex:
        """Swap in ``index`` and return the generation it replaced."""
        with self._lock:
            previous = self._index
            self._index = index
        return previous
