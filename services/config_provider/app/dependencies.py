from __future__ import annotations

import base64
import binascii
import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from loguru import logger

from .metrics import record_request
from .provider import (
    AuthRequirement,
    ConfigBundle,
    ConfigNotFoundError,
    ConfigProvider,
    ConfigurationSource,
    ProviderInternalError,
)
from .settings import provider_settings

API_KEY_HEADER = "x-api-key"


def get_provider(request: Request) -> ConfigProvider:
    provider = getattr(request.app.state, "provider", None)
    if provider is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Provider not initialized")
    return provider


ProviderDep = Annotated[ConfigProvider, Depends(get_provider)]


def extract_request_metadata(request: Request, header_prefix: str | None = None) -> dict[str, str]:
    """Collect client metadata from query parameters and prefixed headers.

    Keys are lower-cased. Header values override query parameters. A
    repeated parameter or header contributes its first value.
    """
    prefix = (header_prefix or provider_settings().metadata_header_prefix).lower()
    metadata: dict[str, str] = {}
    for key, value in request.query_params.multi_items():
        metadata.setdefault(key.lower(), value)
    from_headers: dict[str, str] = {}
    for key in request.headers.keys():
        lk = key.lower()
        if lk.startswith(prefix) and len(lk) > len(prefix):
            from_headers.setdefault(lk[len(prefix):], request.headers.getlist(key)[0])
    metadata.update(from_headers)
    return metadata


def _basic_credentials(request: Request) -> tuple[str, str] | None:
    auth = request.headers.get("authorization")
    if not auth or not auth.lower().startswith("basic "):
        return None
    try:
        decoded = base64.b64decode(auth.split(" ", 1)[1].strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return username, password


def _equal(a: str, b: str) -> bool:
    return secrets.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def credentials_match(
    requirement: AuthRequirement | None,
    api_key: str | None,
    basic: tuple[str, str] | None,
) -> bool:
    """Allow when no requirement applies or any configured credential matches."""
    if requirement is None or requirement.is_empty:
        return True
    if requirement.api_key and api_key and _equal(api_key, requirement.api_key):
        return True
    if requirement.basic_auth is not None and basic is not None:
        username, password = basic
        expected = requirement.basic_auth
        # Evaluate both comparisons to keep timing independent of which one fails.
        user_ok = _equal(username, expected.username)
        password_ok = _equal(password, expected.password)
        return user_ok and password_ok
    return False


def authenticate(request: Request, source: ConfigurationSource) -> None:
    if credentials_match(source.auth, request.headers.get(API_KEY_HEADER), _basic_credentials(request)):
        return
    logger.info(f"authentication failed for config {source.id}")
    headers = None
    if source.auth is not None and source.auth.basic_auth is not None:
        headers = {"WWW-Authenticate": 'Basic realm="config-provider"'}
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized", headers=headers)


def resolve_authorized(request: Request, provider: ConfigProvider, endpoint: str) -> tuple[ConfigBundle, ConfigurationSource]:
    """Resolve the caller's source from its metadata and check its credentials."""
    metadata = extract_request_metadata(request)
    try:
        bundle, source = provider.resolve(metadata)
    except ConfigNotFoundError as exc:
        record_request(endpoint, "not_found")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Config not found") from exc
    except ProviderInternalError as exc:
        record_request(endpoint, "error")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal Server Error") from exc
    try:
        authenticate(request, source)
    except HTTPException:
        record_request(endpoint, "unauthorized")
        raise
    return bundle, source
