from __future__ import annotations

from pathlib import Path

import pytest

from ga4_bridge.config import load_settings


@pytest.fixture()
def clean_env(monkeypatch):
    for name in (
        "GA4_MEASUREMENT_ID",
        "GA4_API_SECRET",
        "GA4_DEBUG_MODE",
        "GA4_COLLECTOR_HOST",
        "GA4_TIMEOUT_SECONDS",
        "SHOPIFY_WEBHOOK_SECRET",
        "GA4_BRIDGE_HOST",
        "GA4_BRIDGE_PORT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_settings_load_from_environment(clean_env, tmp_path: Path) -> None:
    clean_env.setenv("GA4_MEASUREMENT_ID", "G-ABC")
    clean_env.setenv("GA4_API_SECRET", "api-secret")
    clean_env.setenv("GA4_DEBUG_MODE", "1")
    clean_env.setenv("SHOPIFY_WEBHOOK_SECRET", "hook")

    settings = load_settings(tmp_path / ".env")

    assert settings.ga4_measurement_id == "G-ABC"
    assert settings.ga4_api_secret.get_secret_value() == "api-secret"
    assert settings.debug_enabled is True
    assert settings.webhook_secret() == "hook"
    assert settings.ga4_collector_host == "www.google-analytics.com"
    assert (settings.bridge_host, settings.bridge_port) == ("127.0.0.1", 8000)
    assert "api-secret" not in repr(settings)


def test_settings_read_dotenv_file(clean_env, tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("GA4_MEASUREMENT_ID=G-FILE\nGA4_API_SECRET=from-file\n", encoding="utf-8")

    settings = load_settings(env_file)

    assert settings.ga4_measurement_id == "G-FILE"
    assert settings.debug_enabled is False


def test_empty_webhook_secret_disables_verification(clean_env, tmp_path: Path) -> None:
    clean_env.setenv("GA4_MEASUREMENT_ID", "G-ABC")
    clean_env.setenv("GA4_API_SECRET", "api-secret")
    clean_env.setenv("SHOPIFY_WEBHOOK_SECRET", "")

    assert load_settings(tmp_path / ".env").webhook_secret() is None


def test_missing_required_settings_raise(clean_env, tmp_path: Path) -> None:
    with pytest.raises(RuntimeError):
        load_settings(tmp_path / ".env")
