"""Static provider configuration file.

The file declares every configuration source served by this provider::

    version: "1"
    configurations:
      - directory: /etc/gateway/prod
        metadata:
          env: prod
        auth:
          apiKey: s3cret
      - directory: /etc/gateway/default
        default: true
"""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigLoadError, ConfigValidationError
from .loader import load_document, scalar_text


class BasicAuthDefinition(BaseModel):
    username: str = ""
    password: str = ""


class AuthDefinition(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_key: str | None = Field(default=None, alias="apiKey")
    basic_auth: BasicAuthDefinition | None = Field(default=None, alias="basicAuth")


class SourceDefinition(BaseModel):
    """One entry of ``configurations`` as written in the provider file."""

    model_config = ConfigDict(populate_by_name=True)

    directory: str = ""
    metadata: dict[str, str] = Field(default_factory=dict)
    auth: AuthDefinition | None = None
    default: bool = False

    @field_validator("metadata", mode="before")
    @classmethod
    def _stringify_metadata(cls, value):
        if isinstance(value, dict):
            return {str(k): scalar_text(v) for k, v in value.items()}
        return value


class ProviderConfig(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    version: str = "1"
    configurations: list[SourceDefinition] = Field(default_factory=list)


_TEXT_FIELDS = ("metadata", "auth")


def _with_text_fields(document, text_document):
    """Take metadata and credentials from the text parse so they compare as written."""
    if not isinstance(document, dict) or not isinstance(document.get("configurations"), list):
        return document
    configurations = []
    for entry, text_entry in zip(document["configurations"], text_document["configurations"]):
        if isinstance(entry, dict):
            entry = {**entry, **{k: text_entry[k] for k in _TEXT_FIELDS if k in entry}}
        configurations.append(entry)
    return {**document, "configurations": configurations}


def load_provider_config(path: str | Path) -> ProviderConfig:
    """Read and parse the provider configuration file (YAML or JSON)."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigLoadError(f"failed to load provider config file {path}: {exc}", path=str(path)) from exc

    ext = path.suffix.lower()
    try:
        document = load_document(raw, ext)
        text_document = load_document(raw, ext, keep_scalar_text=True)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigLoadError(f"failed to parse provider config file {path}: {exc}", path=str(path)) from exc

    try:
        return ProviderConfig.model_validate(_with_text_fields(document, text_document) or {})
    except ValidationError as exc:
        raise ConfigValidationError(f"invalid provider config file {path}: {exc}") from exc
