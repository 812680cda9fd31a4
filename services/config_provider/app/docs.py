"""OpenAPI customization.

Declares the auth schemes used by the loaded sources and documents the
metadata headers clients can send, taken from the default bundle.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from .settings import provider_settings

_SECURITY_SCHEMES = {
    "basic": ("basicAuth", {"type": "http", "scheme": "basic"}),
    "api_key": ("X-API-Key", {"type": "apiKey", "in": "header", "name": "X-API-Key"}),
}


def _metadata_header(prefix: str, key: str) -> dict[str, Any]:
    return {
        "name": f"{prefix}{key.capitalize()}",
        "in": "header",
        "required": False,
        "schema": {"type": "string"},
        "description": f"Client metadata '{key}' used to select a configuration",
    }


def build_openapi(app: FastAPI) -> dict[str, Any]:
    schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
        license_info={"name": "MIT"},
    )
    provider = getattr(app.state, "provider", None)
    if provider is None:
        return schema

    security: list[dict[str, list[str]]] = []
    schemes: dict[str, Any] = {}
    for scheme in sorted(provider.auth_schemes()):
        name, definition = _SECURITY_SCHEMES[scheme]
        schemes[name] = definition
        security.append({name: []})
    if schemes:
        schema.setdefault("components", {})["securitySchemes"] = schemes

    prefix = provider_settings().metadata_header_prefix
    headers = [_metadata_header(prefix, key) for key in sorted(provider.advertised_metadata())]
    for path, operations in schema.get("paths", {}).items():
        if not path.startswith("/api/v1/config"):
            continue
        for operation in operations.values():
            if security:
                operation["security"] = security
            operation.setdefault("parameters", []).extend(headers)
    return schema


def install_openapi(app: FastAPI) -> None:
    # Rebuilt on every call so docs follow reloads.
    app.openapi = lambda: build_openapi(app)
