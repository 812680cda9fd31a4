from contextlib import asynccontextmanager

from fastapi import FastAPI

from shared.errors import register_exception_handlers

from .docs import install_openapi
from .middleware import setup_middleware
from .provider import ConfigProvider
from .routes import register_routes
from .settings import provider_settings
from .startup import init_provider, setup_instrumentation, setup_logging, shutdown_instrumentation


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Load the first index generation unless a provider was injected
    if getattr(app.state, "provider", None) is None:
        init_provider(app)
    yield
    await shutdown_instrumentation(app)


def create_app(provider: ConfigProvider | None = None) -> FastAPI:
    setup_logging()
    settings = provider_settings()
    docs_enabled = settings.enable_docs
    app = FastAPI(
        title="Gateway Config Provider",
        version="0.1.0",
        description="Serves merged gateway configuration bundles matched on client metadata.",
        lifespan=lifespan,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )
    if provider is not None:
        app.state.provider = provider
    setup_middleware(app)
    register_exception_handlers(app)
    register_routes(app)
    install_openapi(app)
    setup_instrumentation(app)
    return app
