from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from ..provider import ConfigBundle, ProviderStats


class ConfigBundleResponse(BaseModel):
    version: str
    routes: list[Any] = Field(default_factory=list)
    middlewares: list[Any] = Field(default_factory=list)
    metadata: dict[str, str] = Field(default_factory=dict)
    checksum: str = Field(..., description="SHA-256 fingerprint of the bundle content, also sent as ETag")
    timestamp: datetime = Field(..., description="When this bundle was loaded")

    @classmethod
    def from_bundle(cls, bundle: ConfigBundle) -> ConfigBundleResponse:
        return cls(
            version=bundle.version,
            routes=list(bundle.routes),
            middlewares=list(bundle.middlewares),
            metadata=dict(bundle.metadata),
            checksum=bundle.fingerprint,
            timestamp=bundle.loaded_at,
        )


class ProviderStatsResponse(BaseModel):
    configs_loaded: int
    last_reload: datetime | None
    uptime: str
    uptime_seconds: float
    generation: int

    @classmethod
    def from_stats(cls, stats: ProviderStats) -> ProviderStatsResponse:
        return cls(
            configs_loaded=stats.configs_loaded,
            last_reload=stats.last_reload,
            uptime=stats.uptime,
            uptime_seconds=stats.uptime_seconds,
            generation=stats.generation,
        )


class ReloadResponse(BaseModel):
    status: str = "reloaded"
    timestamp: datetime | None
    generation: int
