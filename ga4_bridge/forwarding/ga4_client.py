"""HTTP client for the GA4 Measurement Protocol collector.

Endpoint selection lives here so the route handler only deals with the
forwarded payload and the collector's reply.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from loguru import logger

from ga4_bridge.config import Settings
from ga4_bridge.errors import CollectorUnavailableError
from ga4_bridge.models.events import MeasurementPayload

LIVE_PATH = "/mp/collect"
DEBUG_PATH = "/debug/mp/collect"

LIVE_LABEL = "GA4"
DEBUG_LABEL = "GA4 DEBUG"


@dataclass(frozen=True)
class CollectorResult:
    status_code: int
    text: str
    sent_to: str


class Ga4Client:
    def __init__(
        self,
        *,
        measurement_id: str,
        api_secret: str,
        debug: bool = False,
        host: str = "www.google-analytics.com",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._measurement_id = measurement_id
        self._api_secret = api_secret
        self._debug = debug
        self._host = host.strip().rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "Ga4Client":
        return cls(
            measurement_id=settings.ga4_measurement_id,
            api_secret=settings.ga4_api_secret.get_secret_value(),
            debug=settings.debug_enabled,
            host=settings.ga4_collector_host,
            timeout=settings.ga4_timeout_seconds,
            transport=transport,
        )

    @property
    def sent_to(self) -> str:
        return DEBUG_LABEL if self._debug else LIVE_LABEL

    @property
    def endpoint(self) -> str:
        path = DEBUG_PATH if self._debug else LIVE_PATH
        url = httpx.URL(
            f"https://{self._host}{path}",
            params={"measurement_id": self._measurement_id, "api_secret": self._api_secret},
        )
        return str(url)

    async def send(self, payload: MeasurementPayload) -> CollectorResult:
        """POST ``payload`` and return the collector's reply as-is.

        Non-2xx replies are reported, not raised.

        Raises:
            CollectorUnavailableError on connection failures and timeouts.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.post(self.endpoint, json=payload.to_wire())
        except httpx.HTTPError as exc:
            raise CollectorUnavailableError(
                f"{self.sent_to} collector request failed: {type(exc).__name__}", exc
            ) from exc

        if resp.is_error:
            logger.warning(
                "{} collector answered {} for transaction_id='{}'",
                self.sent_to,
                resp.status_code,
                payload.purchase.transaction_id,
            )
        return CollectorResult(status_code=resp.status_code, text=resp.text, sent_to=self.sent_to)
