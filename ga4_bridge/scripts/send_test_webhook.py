from __future__ import annotations

import argparse
import json
import os
import random
from typing import Any

import httpx
from dotenv import load_dotenv
from loguru import logger

from ga4_bridge.api.security import SIGNATURE_HEADER, compute_shopify_hmac
from ga4_bridge.config import project_root


def _build_order(
    *,
    order_id: int,
    customer_id: int | None,
    email: str | None,
    client_id: str | None,
    currency: str,
    quantity: int,
    price: str,
) -> dict[str, Any]:
    note_attributes: list[dict[str, Any]] = [
        {"name": "utm_source", "value": "send_test_webhook"},
        {"name": "utm_medium", "value": "test"},
    ]
    if client_id:
        note_attributes.insert(0, {"name": "client_id", "value": client_id})

    order: dict[str, Any] = {
        "id": order_id,
        "currency": currency,
        "total_price": f"{float(price) * quantity:.2f}",
        "total_tax": "0.00",
        "total_shipping_price_set": {"shop_money": {"amount": "0.00", "currency_code": currency}},
        "note_attributes": note_attributes,
        "line_items": [
            {
                "id": order_id * 10 + 1,
                "product_id": 9001,
                "variant_id": 90011,
                "sku": "TEST-SKU-001",
                "title": "Test Widget",
                "variant_title": "Default",
                "quantity": quantity,
                "price": price,
            }
        ],
    }
    if customer_id is not None:
        order["customer"] = {"id": customer_id, "email": email}
    return order


def _parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="POST a signed sample Shopify order to a running GA4 bridge."
    )
    p.add_argument("--url", default="http://127.0.0.1:8000/api/shopify-webhook", help="Webhook URL.")
    p.add_argument("--secret", default=None, help="Webhook secret (defaults to SHOPIFY_WEBHOOK_SECRET).")
    p.add_argument("--order-id", type=int, default=None, help="Order id (random if omitted).")
    p.add_argument("--customer-id", type=int, default=None, help="Optional customer id.")
    p.add_argument("--email", default=None, help="Optional customer email.")
    p.add_argument("--client-id", default="", help="Optional GA client_id note attribute.")
    p.add_argument("--currency", default="INR")
    p.add_argument("--quantity", type=int, default=1)
    p.add_argument("--price", default="499.00")
    return p.parse_args()


def main() -> int:
    args = _parse_args()
    env_file = project_root() / ".env"
    if env_file.exists():
        load_dotenv(env_file, override=False)

    secret = args.secret if args.secret is not None else os.getenv("SHOPIFY_WEBHOOK_SECRET", "")
    order = _build_order(
        order_id=args.order_id or random.randint(100000, 999999),
        customer_id=args.customer_id,
        email=args.email,
        client_id=str(args.client_id).strip() or None,
        currency=str(args.currency).strip() or "INR",
        quantity=max(1, int(args.quantity)),
        price=str(args.price),
    )
    body = json.dumps(order, ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    headers = {"Content-Type": "application/json"}
    if secret:
        headers[SIGNATURE_HEADER] = compute_shopify_hmac(body, secret)
    else:
        logger.info("no webhook secret configured; sending unsigned")

    with httpx.Client(timeout=30.0) as client:
        resp = client.post(args.url, content=body, headers=headers)

    logger.info("order_id={} -> HTTP {}", order["id"], resp.status_code)
    print(resp.text)
    return 0 if resp.is_success else 1


if __name__ == "__main__":
    raise SystemExit(main())
