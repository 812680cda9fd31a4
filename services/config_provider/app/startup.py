from fastapi import FastAPI
from loguru import logger
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from .metrics import TimedReload
from .provider import ConfigProvider, ProviderIndex
from .settings import provider_settings


def setup_logging() -> None:
    """Configure Loguru for consistent, structured service logs."""
    logger.remove()
    logger.add(
        sink=lambda msg: print(msg, end=""),
        level=provider_settings().log_level.upper(),
        backtrace=False,
        diagnose=False,
        colorize=False,
        serialize=False,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
               "<level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
               "<level>{message}</level>",
    )
    logger.info("🪵 Logging configured successfully.")


def setup_instrumentation(app: FastAPI) -> None:
    """Attach OpenTelemetry tracing when an OTLP endpoint is configured. Idempotent."""
    settings = provider_settings()
    if not settings.otel_endpoint:
        return
    if isinstance(trace.get_tracer_provider(), TracerProvider):
        logger.info("📈 OpenTelemetry instrumentation already initialized. Skipping reconfiguration.")
        return

    resource = Resource(attributes={SERVICE_NAME: settings.service_name})
    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otel_endpoint)))
    trace.set_tracer_provider(tracer_provider)
    FastAPIInstrumentor.instrument_app(app, tracer_provider=tracer_provider)
    app.state.tracer_provider = tracer_provider
    logger.info("📈 OpenTelemetry instrumentation configured.")


def reload_configuration(provider: ConfigProvider) -> ProviderIndex:
    """Run a full reload with tracing and metrics around it."""
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span("provider.reload"), TimedReload():
        index = provider.reload()
    TimedReload.published(len(index.sources), index.generation)
    return index


def init_provider(app: FastAPI) -> ConfigProvider:
    """Create the provider from settings and load the first index generation.

    A failed initial load aborts startup; there is no last-known-good index yet.
    """
    settings = provider_settings()
    logger.info(f"🚀 Initializing {settings.service_name} ({settings.environment})...")
    for key, value in settings.safe_dict().items():
        logger.info(f"    {key}: {value}")

    provider = ConfigProvider.from_config_file(settings.config_file, cache_ttl_seconds=settings.cache_ttl_seconds)
    try:
        index = reload_configuration(provider)
    except Exception as e:
        logger.error(f"❌ Failed to initialize provider from {settings.config_file}: {e}")
        raise
    app.state.provider = provider
    logger.info(f"✅ Loaded {len(index.sources)} configuration source(s); default={index.default_id!r}.")
    return provider


async def shutdown_instrumentation(app: FastAPI) -> None:
    """Flush and stop OpenTelemetry span processors."""
    tracer_provider = getattr(app.state, "tracer_provider", None)
    if tracer_provider:
        try:
            tracer_provider.shutdown()
        except Exception as e:
            logger.warning(f"⚠️ Error shutting down tracer provider: {e}")
        logger.info("🧹 OpenTelemetry instrumentation shut down gracefully.")
