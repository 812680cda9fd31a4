"""Command-line entry point: ``config-provider -c config.yaml -p 8080``."""

from __future__ import annotations

import argparse
import os
from typing import Sequence

import uvicorn
from loguru import logger

from .main import create_app
from .settings import provider_settings

DEFAULT_PORT = 8080
DEFAULT_TLS_PORT = 8443


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="config-provider", description="Gateway configuration provider")
    parser.add_argument("-c", "--config", help="Path to the provider configuration file")
    parser.add_argument("-p", "--port", type=int, help="HTTP server port")
    parser.add_argument("--host", help="Interface to bind")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    # Flags override the environment; settings are read once the app is built.
    if args.config:
        os.environ["PROVIDER_CONFIG_FILE"] = args.config
    if args.port is not None:
        os.environ["PROVIDER_PORT"] = str(args.port)
    if args.host:
        os.environ["PROVIDER_HOST"] = args.host
    provider_settings.cache_clear()
    settings = provider_settings()

    port = settings.port
    ssl_options: dict[str, str] = {}
    if settings.tls_enabled:
        ssl_options = {"ssl_certfile": settings.tls_cert_path, "ssl_keyfile": settings.tls_key_path}
        if port == DEFAULT_PORT:
            port = DEFAULT_TLS_PORT

    logger.info(f"Starting {settings.service_name} on {settings.host}:{port}")
    uvicorn.run(create_app(), host=settings.host, port=port, log_level=settings.log_level.lower(), **ssl_options)


if __name__ == "__main__":
    main()
