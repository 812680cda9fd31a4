from .config import (
    ConfigBundleResponse,
    ProviderStatsResponse,
    ReloadResponse,
)

__all__ = [
    "ConfigBundleResponse",
    "ProviderStatsResponse",
    "ReloadResponse",
]
