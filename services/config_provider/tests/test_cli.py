from __future__ import annotations

import os

import pytest

from services.config_provider.app import cli
from services.config_provider.app.settings import ProviderSettings, provider_settings


@pytest.fixture()
def captured_run(monkeypatch):
    names = ("PROVIDER_CONFIG_FILE", "PROVIDER_PORT", "PROVIDER_HOST", "PROVIDER_TLS_CERT_PATH", "PROVIDER_TLS_KEY_PATH")
    for name in names:
        monkeypatch.delenv(name, raising=False)
    calls: dict = {}

    def fake_run(app, **kwargs):
        calls["app"] = app
        calls.update(kwargs)

    monkeypatch.setattr(cli.uvicorn, "run", fake_run)
    monkeypatch.setattr(cli, "create_app", lambda: "app")
    yield calls
    # main() writes straight to os.environ
    for name in names:
        os.environ.pop(name, None)
    provider_settings.cache_clear()


def test_flags_override_environment(captured_run, monkeypatch, tmp_path):
    monkeypatch.setenv("PROVIDER_PORT", "9000")
    config_file = tmp_path / "provider.yaml"

    cli.main(["-c", str(config_file), "-p", "9100", "--host", "127.0.0.1"])

    assert captured_run["app"] == "app"
    assert captured_run["port"] == 9100
    assert captured_run["host"] == "127.0.0.1"
    assert provider_settings().config_file == str(config_file)
    assert "ssl_certfile" not in captured_run


def test_tls_moves_default_port(captured_run, monkeypatch):
    monkeypatch.setenv("PROVIDER_TLS_CERT_PATH", "/certs/tls.crt")
    monkeypatch.setenv("PROVIDER_TLS_KEY_PATH", "/certs/tls.key")

    cli.main([])

    assert captured_run["port"] == 8443
    assert captured_run["ssl_certfile"] == "/certs/tls.crt"
    assert captured_run["ssl_keyfile"] == "/certs/tls.key"


def test_safe_dict_masks_key_path():
    settings = ProviderSettings(tls_cert_path="/certs/tls.crt", tls_key_path="/certs/tls.key")

    safe = settings.safe_dict()

    assert settings.tls_enabled
    assert safe["tls_key_path"] == "***"
    assert safe["tls_cert_path"] == "/certs/tls.crt"


def test_init_provider_loads_configured_file(monkeypatch, tmp_path, make_source_dir):
    from fastapi import FastAPI

    from services.config_provider.app.startup import init_provider

    source = make_source_dir("prod")
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        f"configurations:\n  - directory: {source}\n    default: true\n", encoding="utf-8"
    )
    monkeypatch.setenv("PROVIDER_CONFIG_FILE", str(config_file))
    provider_settings.cache_clear()
    app = FastAPI()

    provider = init_provider(app)

    assert app.state.provider is provider
    bundle, _ = provider.resolve({"anything": "goes"})
    assert bundle.routes[0]["name"] == "prod-route"
    provider_settings.cache_clear()


def test_init_provider_fails_without_config(monkeypatch, tmp_path):
    from fastapi import FastAPI

    from services.config_provider.app.provider import ConfigLoadError
    from services.config_provider.app.startup import init_provider

    monkeypatch.setenv("PROVIDER_CONFIG_FILE", str(tmp_path / "missing.yaml"))
    provider_settings.cache_clear()
    app = FastAPI()

    with pytest.raises(ConfigLoadError):
        init_provider(app)

    assert getattr(app.state, "provider", None) is None
    provider_settings.cache_clear()
