from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from ga4_bridge.api.dependencies import get_ga4_client, get_settings
from ga4_bridge.api.webhook_app import app
from ga4_bridge.config import Settings
from ga4_bridge.forwarding.ga4_client import Ga4Client


def make_settings(**overrides: Any) -> Settings:
    data: dict[str, Any] = {
        "GA4_MEASUREMENT_ID": "G-TEST123",
        "GA4_API_SECRET": "mp-secret",
        "GA4_DEBUG_MODE": "",
        "SHOPIFY_WEBHOOK_SECRET": "",
    }
    data.update(overrides)
    return Settings.model_validate(data)


class CollectorStub:
    """Stands in for the GA4 collector and records every request it receives."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 204
        self.text = ""
        self.error: Exception | None = None

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text=self.text)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture()
def settings_factory():
    return make_settings


@pytest.fixture()
def collector() -> CollectorStub:
    return CollectorStub()


@pytest.fixture()
def sample_order() -> dict[str, Any]:
    return {
        "id": 1001,
        "customer": {"id": 77, "email": "a@b.com"},
        "total_price": "199.50",
        "currency": "USD",
        "line_items": [{"product_id": 9, "title": "Widget", "quantity": 2, "price": "50"}],
        "note_attributes": [{"name": "gclid", "value": "abc123"}],
    }


@pytest.fixture()
def make_client(collector: CollectorStub):
    def _make(**settings_overrides: Any) -> TestClient:
        settings = make_settings(**settings_overrides)
        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_ga4_client] = lambda: Ga4Client.from_settings(
            settings, transport=collector.transport
        )
        return TestClient(app)

    try:
        yield _make
    finally:
        app.dependency_overrides.clear()
