from __future__ import annotations

import threading
import time
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Callable, Iterable

from loguru import logger

from .config import SourceDefinition
from .errors import ConfigLoadError, ProviderError
from .fingerprint import compute_fingerprint
from .index import build_sources, default_source_id
from .loader import load_bundle
from .models import CacheEntry, ConfigBundle, ConfigurationSource, ProviderIndex
from .store import CacheStore

DefinitionsFactory = Callable[[], Iterable[SourceDefinition]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReloadCoordinator:
    """Rebuilds the whole index off to the side and publishes it in one swap.

    Reloads are serialized; a second caller waits for the first to finish.
    Readers keep using the previous generation until the swap, and a failed
    reload never touches it.
    """

    def __init__(
        self,
        store: CacheStore,
        definitions: DefinitionsFactory,
        cache_ttl_seconds: float = 300.0,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.definitions = definitions
        self.cache_ttl = timedelta(seconds=cache_ttl_seconds)
        self.clock = clock
        self._lock = threading.Lock()

    def reload(self) -> ProviderIndex:
        with self._lock:
            started = time.perf_counter()
            previous = self.store.snapshot()
            try:
                index = self.build_index(generation=previous.generation + 1)
            except ProviderError as exc:
                logger.error(f"Reload failed, keeping generation {previous.generation}: {exc}")
                raise
            index = replace(index, last_reload_at=self.clock())
            self.store.publish(index)
            elapsed = (time.perf_counter() - started) * 1000
            logger.info(
                f"Published configuration generation {index.generation}: "
                f"{len(index.sources)} source(s) in {elapsed:.2f}ms"
            )
            return index

    def build_index(self, generation: int) -> ProviderIndex:
        """Load every source into a fresh, unpublished index."""
        sources = build_sources(self.definitions())
        cache: dict[str, CacheEntry] = {}
        for source in sources:
            cache[source.id] = self._load_entry(source)
        return ProviderIndex(
            sources=sources,
            cache=MappingProxyType(cache),
            default_id=default_source_id(sources),
            generation=generation,
        )

    def _load_entry(self, source: ConfigurationSource) -> CacheEntry:
        try:
            bundle = load_bundle(source.directory)
        except ConfigLoadError as exc:
            raise ConfigLoadError(f"failed to load config {source.id}: {exc}", path=exc.path) from exc

        metadata = dict(bundle.metadata)
        metadata.update(source.metadata)
        bundle = replace(bundle, metadata=metadata)
        loaded_at = self.clock()
        bundle = replace(bundle, fingerprint=compute_fingerprint(bundle), loaded_at=loaded_at)
        return _entry_for(bundle, loaded_at + self.cache_ttl)


def _entry_for(bundle: ConfigBundle, expires_at: datetime) -> CacheEntry:
    return CacheEntry(bundle=bundle, expires_at=expires_at, fingerprint=bundle.fingerprint)
