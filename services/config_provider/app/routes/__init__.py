"""Route registration for the config provider."""

from fastapi import APIRouter, FastAPI

from . import config, system


def register_routes(app: FastAPI) -> None:
    """Register system and provider-config routers on the app."""
    router = APIRouter()
    router.include_router(system.router, tags=["system"])
    router.include_router(config.router)
    app.include_router(router)
