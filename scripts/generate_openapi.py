"""Generate the OpenAPI spec for the config provider.

Pass a provider configuration file to include the auth schemes and metadata
headers of its sources: ``python scripts/generate_openapi.py config.yaml``.
"""

import importlib
import json
import sys
from pathlib import Path
from typing import Callable

from fastapi import FastAPI

SERVICES = {
    "config-provider": "services.config_provider.app.main:create_app",
}


def load_app(factory_path: str) -> FastAPI:
    module_path, factory_name = factory_path.split(":")
    module = importlib.import_module(module_path)
    factory: Callable[..., FastAPI] = getattr(module, factory_name)
    return factory()


def main(argv: list[str]) -> None:
    out_dir = Path("openapi")
    out_dir.mkdir(exist_ok=True)
    for name, dotted in SERVICES.items():
        app = load_app(dotted)
        if argv:
            from services.config_provider.app.provider import ConfigProvider

            provider = ConfigProvider.from_config_file(argv[0])
            provider.reload()
            app.state.provider = provider
        schema = app.openapi()
        target = out_dir / f"{name}.json"
        target.write_text(json.dumps(schema, indent=2))
        print(f"Wrote {target}")


if __name__ == "__main__":
    main(sys.argv[1:])
