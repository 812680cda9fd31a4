"""Configuration endpoints served to gateway instances.

Every endpoint resolves the caller's configuration source from its metadata
(query parameters and ``X-Gateway-Meta-*`` headers) and checks that source's
credentials before answering.

- GET  /api/v1/config         -> matched bundle, with ETag / If-None-Match support
- GET  /api/v1/config/stats   -> provider statistics
- GET|POST /api/v1/config/reload -> rebuild and publish the whole index
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, Response, status
from loguru import logger

from ..dependencies import ProviderDep, resolve_authorized
from ..metrics import record_request
from ..provider import ProviderError
from ..schemas import ConfigBundleResponse, ProviderStatsResponse, ReloadResponse
from ..startup import reload_configuration

router = APIRouter(prefix="/api/v1/config", tags=["provider-config"])


def etag_matches(if_none_match: str | None, etag: str) -> bool:
    """Weak comparison of an ``If-None-Match`` header against a bare ETag."""
    if not if_none_match or not etag:
        return False
    for candidate in if_none_match.split(","):
        candidate = candidate.strip()
        if candidate == "*":
            return True
        if candidate.startswith("W/"):
            candidate = candidate[2:]
        if candidate.strip('"') == etag:
            return True
    return False


@router.get("", response_model=ConfigBundleResponse, summary="Get provider config")
@router.get("/", response_model=ConfigBundleResponse, include_in_schema=False)
async def get_config(request: Request, provider: ProviderDep) -> Response:
    """Return the gateway configuration bundle that best matches the caller."""
    bundle, source = resolve_authorized(request, provider, "config")
    headers = {"ETag": bundle.fingerprint}
    if etag_matches(request.headers.get("if-none-match"), bundle.fingerprint):
        record_request("config", "not_modified")
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=headers)

    record_request("config", "ok")
    logger.debug(f"serving configuration {source.id!r} ({bundle.fingerprint[:12]})")
    payload = ConfigBundleResponse.from_bundle(bundle)
    return Response(
        content=payload.model_dump_json(),
        media_type="application/json",
        headers=headers,
    )


@router.get("/stats", response_model=ProviderStatsResponse, summary="Get provider statistics")
async def get_stats(request: Request, provider: ProviderDep) -> ProviderStatsResponse:
    resolve_authorized(request, provider, "stats")
    record_request("stats", "ok")
    return ProviderStatsResponse.from_stats(provider.stats())


@router.api_route("/reload", methods=["GET", "POST"], response_model=ReloadResponse, summary="Reload configuration")
def reload_config(request: Request, provider: ProviderDep) -> ReloadResponse:
    """Reload every configuration source and publish the new index atomically.

    Runs in the worker threadpool; a failure keeps the previous index live.
    """
    resolve_authorized(request, provider, "reload")
    try:
        index = reload_configuration(provider)
    except ProviderError as exc:
        record_request("reload", "error")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Reload failed: {exc}") from exc
    record_request("reload", "ok")
    return ReloadResponse(timestamp=index.last_reload_at, generation=index.generation)
