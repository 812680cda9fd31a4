from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from services.config_provider.app.provider.config import SourceDefinition


def _write_fragment(directory: Path, name: str, document: Any) -> Path:
    """Write ``document`` as YAML or JSON depending on ``name``'s extension."""
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix == ".json":
        path.write_text(json.dumps(document), encoding="utf-8")
    else:
        path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture()
def make_source_dir(tmp_path: Path) -> Callable[..., Path]:
    """Create a fragment directory holding one route named after the source."""

    def _make(name: str, *, routes: list[dict] | None = None, metadata: dict | None = None) -> Path:
        directory = tmp_path / name
        directory.mkdir(parents=True, exist_ok=True)
        _write_fragment(
            directory,
            "routes.yaml",
            {
                "routes": routes if routes is not None else [{"name": f"{name}-route", "path": f"/{name}"}],
                "metadata": metadata or {},
            },
        )
        return directory

    return _make


def _definition(directory: Path | str, metadata: dict[str, str] | None = None, **kwargs: Any) -> SourceDefinition:
    return SourceDefinition(directory=str(directory), metadata=metadata or {}, **kwargs)


@pytest.fixture()
def write_fragment() -> Callable[..., Path]:
    return _write_fragment


@pytest.fixture()
def definition() -> Callable[..., SourceDefinition]:
    return _definition
