from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ..settings import provider_settings

router = APIRouter()


@router.get("/")
async def root() -> dict[str, str]:
    return {"service": provider_settings().service_name}


@router.get("/healthz")
async def health_check() -> dict[str, str]:
    return {"status": "ok", "service": provider_settings().service_name}


@router.get("/api/v1/healthz")
async def health_check_v1() -> dict[str, str]:
    return await health_check()


@router.get("/api/v1/metrics")
async def metrics() -> Response:
    """Expose Prometheus metrics for the config provider."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
