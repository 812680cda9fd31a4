from __future__ import annotations

import time
from datetime import timedelta
from pathlib import Path
from typing import Mapping

from .config import load_provider_config
from .models import ConfigBundle, ConfigurationSource, ProviderIndex, ProviderStats
from .reload import DefinitionsFactory, ReloadCoordinator
from .resolver import Resolver
from .store import CacheStore


def _format_uptime(seconds: float) -> str:
    return str(timedelta(seconds=int(seconds)))


class ConfigProvider:
    """Entry point used by the HTTP layer.

    Wires the cache store, resolver and reload coordinator around one shared
    index. Nothing is loaded until :meth:`reload` is called.
    """

    def __init__(self, definitions: DefinitionsFactory, cache_ttl_seconds: float = 300.0) -> None:
        self.store = CacheStore()
        self.resolver = Resolver(self.store)
        self.coordinator = ReloadCoordinator(self.store, definitions, cache_ttl_seconds=cache_ttl_seconds)
        self._started = time.monotonic()

    @classmethod
    def from_config_file(cls, path: str | Path, cache_ttl_seconds: float = 300.0) -> ConfigProvider:
        """Build a provider whose every reload re-reads ``path``."""
        return cls(lambda: load_provider_config(path).configurations, cache_ttl_seconds=cache_ttl_seconds)

    def resolve(self, metadata: Mapping[str, str]) -> tuple[ConfigBundle, ConfigurationSource]:
        return self.resolver.resolve(metadata)

    def reload(self) -> ProviderIndex:
        return self.coordinator.reload()

    def source_for(self, source_id: str) -> ConfigurationSource:
        return self.resolver.source_for(source_id)

    def stats(self) -> ProviderStats:
        index = self.store.snapshot()
        uptime = time.monotonic() - self._started
        return ProviderStats(
            configs_loaded=len(index.cache),
            last_reload=index.last_reload_at,
            uptime=_format_uptime(uptime),
            uptime_seconds=round(uptime, 3),
            generation=index.generation,
        )

    def advertised_metadata(self) -> dict[str, str]:
        """Metadata of the default bundle, or the union of declared metadata."""
        index = self.store.snapshot()
        if index.default_id is not None and index.default_id in index.cache:
            return dict(index.cache[index.default_id].bundle.metadata)
        merged: dict[str, str] = {}
        for source in index.sources:
            merged.update(source.metadata)
        return merged

    def auth_schemes(self) -> set[str]:
        """Names of the auth mechanisms any published source requires."""
        schemes: set[str] = set()
        for source in self.store.snapshot().sources:
            if source.auth is None:
                continue
            if source.auth.api_key:
                schemes.add("api_key")
            if source.auth.basic_auth is not None:
                schemes.add("basic")
        return schemes
