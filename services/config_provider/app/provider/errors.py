"""Error taxonomy for the configuration engine.

Load and validation errors abort a reload and leave the published index in
place. Not-found is a per-request condition. Internal errors mean the index
and its cache went out of sync and should never happen.
"""

from __future__ import annotations


class ProviderError(Exception):
    """Base class for every error raised by the configuration engine."""


class ConfigLoadError(ProviderError):
    """A fragment directory or file could not be read or parsed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class ConfigValidationError(ProviderError):
    """The set of configuration sources violates an index invariant."""


class ConfigNotFoundError(ProviderError):
    """No configuration source matches the request and no default exists."""


class ProviderInternalError(ProviderError):
    """A resolved source has no cache entry in the current index generation."""
