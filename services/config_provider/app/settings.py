"""Config provider settings using Pydantic Settings.

Resolution precedence: environment variables > .env file > code defaults.
Variables use the ``PROVIDER_`` prefix, e.g. ``PROVIDER_CONFIG_FILE``.
"""

from functools import lru_cache
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

_SECRET_FIELDS = {"tls_key_path"}


class ProviderSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PROVIDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    service_name: str = "config-provider"
    environment: str = "local"
    log_level: str = "INFO"

    # Static provider configuration listing every source directory
    config_file: str = "config.yaml"
    host: str = "0.0.0.0"
    port: int = 8080
    enable_docs: bool = True
    # Request headers carrying client metadata, matched case-insensitively
    metadata_header_prefix: str = "X-Gateway-Meta-"
    cache_ttl_seconds: float = 300.0

    tls_cert_path: str | None = None
    tls_key_path: str | None = None
    # Tracing is disabled unless an OTLP endpoint is configured
    otel_endpoint: str | None = None

    @property
    def tls_enabled(self) -> bool:
        return bool(self.tls_cert_path and self.tls_key_path)

    def safe_dict(self) -> dict[str, Any]:
        """Settings suitable for startup logs."""
        return {k: ("***" if k in _SECRET_FIELDS and v else v) for k, v in self.model_dump().items()}


@lru_cache
def provider_settings() -> ProviderSettings:
    return ProviderSettings()
