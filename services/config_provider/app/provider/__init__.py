"""Configuration resolution and cache engine."""

from .errors import (
    ConfigLoadError,
    ConfigNotFoundError,
    ConfigValidationError,
    ProviderError,
    ProviderInternalError,
)
from .fingerprint import compute_fingerprint
from .index import build_sources, derive_key
from .loader import load_bundle
from .models import (
    AuthRequirement,
    BasicAuth,
    CacheEntry,
    ConfigBundle,
    ConfigurationSource,
    ProviderIndex,
    ProviderStats,
)
from .service import ConfigProvider

__all__ = [
    "AuthRequirement",
    "BasicAuth",
    "CacheEntry",
    "ConfigBundle",
    "ConfigLoadError",
    "ConfigNotFoundError",
    "ConfigProvider",
    "ConfigValidationError",
    "ConfigurationSource",
    "ProviderError",
    "ProviderIndex",
    "ProviderInternalError",
    "ProviderStats",
    "build_sources",
    "compute_fingerprint",
    "derive_key",
    "load_bundle",
]
