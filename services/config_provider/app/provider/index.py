"""Canonical key derivation and validation of configuration sources."""

from __future__ import annotations

import os
from typing import Iterable, Mapping

from loguru import logger

from .config import SourceDefinition
from .errors import ConfigValidationError
from .models import AuthRequirement, BasicAuth, ConfigurationSource

DEFAULT_KEY = "default"


def derive_key(metadata: Mapping[str, str]) -> str:
    """Build the canonical key for a metadata mapping.

    Pairs are joined in key-sorted order so the result never depends on
    mapping iteration order.
    """
    if not metadata:
        return DEFAULT_KEY
    pairs = [f"{k}={metadata[k]}" for k in sorted(metadata)]
    return "&".join(pairs).lower()


def normalize_metadata(metadata: Mapping[str, str] | None) -> dict[str, str]:
    return {str(k).lower(): str(v) for k, v in (metadata or {}).items()}


def _auth_requirement(definition: SourceDefinition, position: int) -> AuthRequirement | None:
    auth = definition.auth
    if auth is None:
        return None
    basic = None
    if auth.basic_auth is not None:
        if not auth.basic_auth.username or not auth.basic_auth.password:
            raise ConfigValidationError(f"configuration[{position}]: basic auth username or password missing")
        basic = BasicAuth(username=auth.basic_auth.username, password=auth.basic_auth.password)
    requirement = AuthRequirement(api_key=auth.api_key or None, basic_auth=basic)
    return None if requirement.is_empty else requirement


def build_sources(definitions: Iterable[SourceDefinition]) -> tuple[ConfigurationSource, ...]:
    """Turn static definitions into validated sources, in declaration order.

    The whole set is rejected on the first violated invariant.
    """
    sources: list[ConfigurationSource] = []
    seen: dict[str, int] = {}
    default_count = 0

    for position, definition in enumerate(definitions):
        directory = definition.directory.strip()
        if not directory:
            raise ConfigValidationError(f"configuration[{position}]: directory is required")
        if not os.path.isdir(directory):
            raise ConfigValidationError(f"configuration[{position}]: directory does not exist: {directory}")

        metadata = normalize_metadata(definition.metadata)
        if not metadata:
            logger.warning(f"configuration[{position}] declares empty metadata")

        key = derive_key(metadata)
        if key in seen:
            raise ConfigValidationError(
                f"configuration[{position}]: duplicate configuration id {key!r} (also configuration[{seen[key]}])"
            )
        seen[key] = position

        if definition.default:
            default_count += 1
            if default_count > 1:
                raise ConfigValidationError("only one configuration can be marked as default")

        sources.append(
            ConfigurationSource(
                id=key,
                directory=directory,
                metadata=metadata,
                auth=_auth_requirement(definition, position),
                default=definition.default,
            )
        )

    if not sources:
        raise ConfigValidationError("at least one configuration is required")
    return tuple(sources)


def default_source_id(sources: Iterable[ConfigurationSource]) -> str | None:
    for source in sources:
        if source.default:
            return source.id
    return None
