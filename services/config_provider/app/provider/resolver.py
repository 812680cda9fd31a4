"""Metadata matching.

A source scores one point for every request key whose value equals the
source's declared value. The highest score wins, the first-declared source
wins a tie, and the default source is only reached when nothing scores above
zero.
"""

from __future__ import annotations

from typing import Mapping

from loguru import logger

from .errors import ConfigNotFoundError, ProviderInternalError
from .models import ConfigBundle, ConfigurationSource, ProviderIndex
from .store import CacheStore


def score(source: ConfigurationSource, request_metadata: Mapping[str, str]) -> int:
    declared = source.metadata
    return sum(1 for k, v in request_metadata.items() if k in declared and declared[k] == v)


def match_source(index: ProviderIndex, request_metadata: Mapping[str, str]) -> ConfigurationSource | None:
    best: ConfigurationSource | None = None
    best_score = 0
    for source in index.sources:
        current = score(source, request_metadata)
        if current > best_score:
            best, best_score = source, current

    if best is not None:
        logger.debug(f"metadata matched configuration {best.id!r} with score {best_score}")
        return best

    if index.default_id is not None:
        return index.source_by_id(index.default_id)
    return None


class Resolver:
    """Read-only lookups against the currently published index."""

    def __init__(self, store: CacheStore) -> None:
        self.store = store

    def resolve(self, request_metadata: Mapping[str, str]) -> tuple[ConfigBundle, ConfigurationSource]:
        index = self.store.snapshot()
        source = match_source(index, request_metadata)
        if source is None:
            logger.debug("no configuration matched metadata")
            raise ConfigNotFoundError("no configuration matched metadata")

        entry = index.cache.get(source.id)
        if entry is None:
            logger.error(
                f"configuration {source.id!r} has no cache entry in generation {index.generation}; index and cache are out of sync"
            )
            raise ProviderInternalError(f"config {source.id} not loaded")
        return entry.bundle, source

    def source_for(self, source_id: str) -> ConfigurationSource:
        source = self.store.snapshot().source_by_id(source_id)
        if source is None:
            raise ConfigNotFoundError(f"unknown configuration id: {source_id}")
        return source
