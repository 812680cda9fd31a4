from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping

DEFAULT_BUNDLE_VERSION = "1.0"

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


@dataclass(frozen=True)
class BasicAuth:
    username: str
    password: str


@dataclass(frozen=True)
class AuthRequirement:
    """Credentials a client must present to receive a source's bundle."""

    api_key: str | None = None
    basic_auth: BasicAuth | None = None

    @property
    def is_empty(self) -> bool:
        return not self.api_key and self.basic_auth is None


@dataclass(frozen=True)
class ConfigurationSource:
    """A declared configuration entry, before or after its bundle is loaded.

    ``metadata`` keys are lower-cased on construction by the index builder;
    ``id`` is the canonical key derived from that metadata.
    """

    id: str
    directory: str
    metadata: Mapping[str, str] = field(default_factory=dict)
    auth: AuthRequirement | None = None
    default: bool = False


@dataclass(frozen=True)
class ConfigBundle:
    """Merged, servable payload for one source.

    Route and middleware records are opaque documents passed through as loaded.
    """

    version: str = DEFAULT_BUNDLE_VERSION
    routes: tuple[Any, ...] = ()
    middlewares: tuple[Any, ...] = ()
    metadata: Mapping[str, str] = field(default_factory=dict)
    fingerprint: str = ""
    loaded_at: datetime = _EPOCH

    def content(self) -> dict[str, Any]:
        """Fields covered by the fingerprint."""
        return {
            "version": self.version,
            "routes": list(self.routes),
            "middlewares": list(self.middlewares),
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class CacheEntry:
    bundle: ConfigBundle
    # Informational only: entries are replaced wholesale on reload, never expired.
    expires_at: datetime
    fingerprint: str


@dataclass(frozen=True)
class ProviderIndex:
    """One complete, immutable generation of sources and their bundles."""

    sources: tuple[ConfigurationSource, ...] = ()
    cache: Mapping[str, CacheEntry] = field(default_factory=lambda: MappingProxyType({}))
    default_id: str | None = None
    last_reload_at: datetime | None = None
    generation: int = 0

    def source_by_id(self, source_id: str) -> ConfigurationSource | None:
        for source in self.sources:
            if source.id == source_id:
                return source
        return None


@dataclass(frozen=True)
class ProviderStats:
    configs_loaded: int
    last_reload: datetime | None
    uptime: str
    uptime_seconds: float
    generation: int
