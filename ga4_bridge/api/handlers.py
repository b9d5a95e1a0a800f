from __future__ import annotations

from typing import Any

from loguru import logger

from ga4_bridge.forwarding.ga4_client import Ga4Client
from ga4_bridge.mapping.order_mapper import map_order


async def forward_order(raw_body: bytes, client: Ga4Client) -> dict[str, Any]:
    """Map an authenticated order body to a purchase event and forward it.

    Raises:
        MalformedOrderError if the body is not a JSON order.
        CollectorUnavailableError if the collector cannot be reached.
    """
    payload = map_order(raw_body)
    purchase = payload.purchase

    result = await client.send(payload)
    logger.info(
        "forwarded purchase transaction_id='{}' items={} value={} {} to {} (status {})",
        purchase.transaction_id,
        len(purchase.items),
        purchase.value,
        purchase.currency,
        result.sent_to,
        result.status_code,
    )
    return {"status": "ok", "sent_to": result.sent_to, "ga_response": result.text}
