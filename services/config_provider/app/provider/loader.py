"""Bundle loader.

Walks a source directory, parses every YAML/JSON fragment and merges them into
a single :class:`ConfigBundle`. Routes and middlewares are concatenated in
traversal order, metadata merges last-write-wins. One bad fragment fails the
whole directory.

Traversal is sorted by name at every level. Route order only affects priority
fields carried inside the payload, never matching in this engine, but a sorted
walk keeps fingerprints stable across filesystems.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any

import yaml
from loguru import logger

from .errors import ConfigLoadError
from .models import DEFAULT_BUNDLE_VERSION, ConfigBundle

YAML_EXTENSIONS = {".yaml", ".yml"}
JSON_EXTENSIONS = {".json"}


class ScalarTextLoader(yaml.SafeLoader):
    """Safe loader that keeps bool, number and date scalars as written."""


def _construct_text(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> str:
    return loader.construct_scalar(node)


for _tag in ("bool", "int", "float", "timestamp"):
    ScalarTextLoader.add_constructor(f"tag:yaml.org,2002:{_tag}", _construct_text)


def scalar_text(value: Any) -> str:
    """Render a metadata value as a string; ``true``/``false`` for booleans."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def load_document(raw: str, ext: str, keep_scalar_text: bool = False) -> Any:
    """Parse YAML or JSON text by extension.

    With ``keep_scalar_text`` numbers keep their source spelling (``1.10``
    stays ``"1.10"``) and YAML booleans stay as written.
    """
    if ext in JSON_EXTENSIONS:
        if keep_scalar_text:
            return json.loads(raw, parse_int=str, parse_float=str)
        return json.loads(raw)
    if keep_scalar_text:
        return yaml.load(raw, Loader=ScalarTextLoader)
    return yaml.safe_load(raw)


@dataclass
class _Fragment:
    version: str | None = None
    routes: list[Any] = field(default_factory=list)
    middlewares: list[Any] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)


def load_bundle(directory: str) -> ConfigBundle:
    """Load and merge every recognized fragment under ``directory``."""
    if not os.path.isdir(directory):
        raise ConfigLoadError(f"configuration directory does not exist: {directory}", path=directory)

    version = DEFAULT_BUNDLE_VERSION
    routes: list[Any] = []
    middlewares: list[Any] = []
    metadata: dict[str, str] = {}
    parsed = 0

    for path in iter_fragment_files(directory):
        fragment = parse_fragment(path)
        if fragment.version is not None:
            version = fragment.version
        routes.extend(fragment.routes)
        middlewares.extend(fragment.middlewares)
        metadata.update(fragment.metadata)
        parsed += 1

    logger.debug(f"Loaded {parsed} fragment(s) from {directory}: {len(routes)} routes, {len(middlewares)} middlewares")
    return ConfigBundle(
        version=version,
        routes=tuple(routes),
        middlewares=tuple(middlewares),
        metadata=metadata,
    )


def iter_fragment_files(directory: str):
    """Yield recognized fragment paths under ``directory`` in sorted order."""

    def _raise(exc: OSError) -> None:
        raise ConfigLoadError(f"failed to walk {exc.filename}: {exc.strerror}", path=exc.filename) from exc

    for root, dirs, files in os.walk(directory, onerror=_raise):
        dirs.sort()
        for name in sorted(files):
            ext = os.path.splitext(name)[1].lower()
            if ext in YAML_EXTENSIONS or ext in JSON_EXTENSIONS:
                yield os.path.join(root, name)


def parse_fragment(path: str) -> _Fragment:
    """Parse one fragment file according to its extension."""
    try:
        with open(path, encoding="utf-8") as fh:
            raw = fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"failed to read {path}: {exc}", path=path) from exc

    ext = os.path.splitext(path)[1].lower()
    try:
        document = load_document(raw, ext)
        # Version and metadata are matched as text, so read them as written.
        text_document = load_document(raw, ext, keep_scalar_text=True) if isinstance(document, dict) else None
    except json.JSONDecodeError as exc:
        raise ConfigLoadError(f"failed to parse JSON {path}: {exc}", path=path) from exc
    except yaml.YAMLError as exc:
        raise ConfigLoadError(f"failed to parse YAML {path}: {exc}", path=path) from exc

    return _fragment_from_document(document, text_document, path)


def _list_field(document: dict, name: str, path: str) -> list[Any]:
    value = document.get(name)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigLoadError(f"{path}: '{name}' must be a list", path=path)
    return value


def _fragment_from_document(document: Any, text_document: Any, path: str) -> _Fragment:
    if document is None:
        return _Fragment()
    if not isinstance(document, dict):
        raise ConfigLoadError(f"{path}: top-level document must be a mapping", path=path)

    routes = _list_field(document, "routes", path)
    middlewares = _list_field(document, "middlewares", path)
    metadata = text_document.get("metadata")
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise ConfigLoadError(f"{path}: 'metadata' must be a mapping", path=path)

    version = text_document.get("version")
    return _Fragment(
        version=scalar_text(version) if version is not None else None,
        routes=routes,
        middlewares=middlewares,
        metadata={str(k): scalar_text(v) for k, v in metadata.items()},
    )
