from __future__ import annotations

from typing import Any

import pytest

from ga4_bridge import run_server


@pytest.fixture()
def uvicorn_calls(monkeypatch) -> list[dict[str, Any]]:
    calls: list[dict[str, Any]] = []

    def _run(app: str, **kwargs: Any) -> None:
        calls.append({"app": app, **kwargs})

    monkeypatch.setattr(run_server.uvicorn, "run", _run)
    return calls


def test_missing_configuration_fails_before_serving(monkeypatch, uvicorn_calls) -> None:
    def _broken() -> None:
        raise RuntimeError("Invalid or missing environment variables.")

    monkeypatch.setattr(run_server, "load_settings", _broken)

    assert run_server.main([]) == 1
    assert uvicorn_calls == []


def test_bind_address_comes_from_settings(monkeypatch, uvicorn_calls, settings_factory) -> None:
    settings = settings_factory(GA4_BRIDGE_HOST="0.0.0.0", GA4_BRIDGE_PORT="9300", LOG_LEVEL="WARNING")
    monkeypatch.setattr(run_server, "load_settings", lambda: settings)

    assert run_server.main([]) == 0

    (call,) = uvicorn_calls
    assert call["app"] == run_server.APP_PATH
    assert call["host"] == "0.0.0.0"
    assert call["port"] == 9300
    assert call["log_level"] == "warning"
    assert call["reload"] is False


def test_command_line_overrides_settings(monkeypatch, uvicorn_calls, settings_factory) -> None:
    monkeypatch.setattr(run_server, "load_settings", lambda: settings_factory())

    assert run_server.main(["--host", "10.0.0.5", "--port", "8123", "--reload"]) == 0

    (call,) = uvicorn_calls
    assert (call["host"], call["port"], call["reload"]) == ("10.0.0.5", 8123, True)


def test_startup_summary_hides_secrets(settings_factory) -> None:
    summary = run_server._describe(settings_factory(SHOPIFY_WEBHOOK_SECRET="whsec", GA4_DEBUG_MODE="1"))

    assert summary == "measurement_id=G-TEST123 target=GA4 DEBUG hmac=on"
    assert "mp-secret" not in summary
