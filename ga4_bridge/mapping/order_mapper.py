from __future__ import annotations

import json
import math
import re
from typing import Any

from ga4_bridge.errors import MalformedOrderError
from ga4_bridge.models.events import (
    ATTRIBUTION_KEYS,
    MeasurementPayload,
    PurchaseEvent,
    PurchaseItem,
    PurchaseParams,
)

DEFAULT_CURRENCY = "INR"

_NUMERIC_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def to_number(value: Any, fallback: float = 0) -> float:
    """Coerce ``value`` to a finite number, reading a leading numeric prefix from strings."""
    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, (int, float)):
        try:
            n = float(value)
        except OverflowError:
            return fallback
    else:
        m = _NUMERIC_PREFIX.match(str(value))
        if m is None:
            return fallback
        n = float(m.group(1))
    return n if math.isfinite(n) else fallback


def first_present(*candidates: Any) -> Any | None:
    for c in candidates:
        if c:
            return c
    return None


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _nested(obj: Any, *keys: str) -> Any | None:
    cur = obj
    for k in keys:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(k)
    return cur


def _shop_money(obj: Any, field: str) -> Any | None:
    return _nested(obj, field, "shop_money", "amount")


class TrackingAttributes:
    """Case-insensitive view over Shopify ``note_attributes``; the first pair per name wins."""

    def __init__(self, pairs: Any) -> None:
        self._values: dict[str, Any] = {}
        if not isinstance(pairs, list):
            return
        for pair in pairs:
            if not isinstance(pair, dict):
                continue
            name = pair.get("name")
            if not isinstance(name, str):
                continue
            self._values.setdefault(name.lower(), pair.get("value"))

    def get(self, key: str) -> str | None:
        value = self._values.get(key.lower())
        if not value:
            return None
        return str(value)

    def __len__(self) -> int:
        return len(self._values)


def decode_order(raw_body: bytes) -> dict[str, Any]:
    try:
        order = json.loads(raw_body)
    except ValueError as exc:
        raise MalformedOrderError("order body is not valid JSON", exc) from exc
    if not isinstance(order, dict):
        raise MalformedOrderError(f"order body must be an object, got {type(order).__name__}")
    if order.get("id") in (None, ""):
        raise MalformedOrderError("order has no id")
    return order


def resolve_client_id(order: dict[str, Any], attrs: TrackingAttributes) -> str:
    customer_id = _as_dict(order.get("customer")).get("id")
    return (
        attrs.get("client_id")
        or attrs.get("_ga_cid")
        or (str(customer_id) if customer_id else None)
        or str(order["id"])
    )


def resolve_user_id(order: dict[str, Any]) -> str | None:
    email = _as_dict(order.get("customer")).get("email")
    return str(email) if email else None


def extract_attribution(attrs: TrackingAttributes) -> dict[str, str]:
    out: dict[str, str] = {}
    for key in ATTRIBUTION_KEYS:
        value = attrs.get(key)
        if value:
            out[key] = value
    return out


def _quantity(value: Any) -> int:
    if not value:
        return 1
    q = int(to_number(value, fallback=1))
    return q if q >= 1 else 1


def _collection_brand(order: dict[str, Any]) -> str | None:
    # Vendor is read off the line-item collection, not each item. Shopify sends
    # a list there, so the brand is normally absent.
    vendor = _nested(order, "line_items", "vendor")
    return str(vendor) if vendor else None


def normalize_line_item(item: dict[str, Any], brand: str | None = None) -> PurchaseItem:
    item_id = first_present(
        item.get("product_id"), item.get("sku"), item.get("variant_id"), item.get("id")
    )
    item_name = first_present(item.get("title"), item.get("name"))
    variant = item.get("variant_title")
    return PurchaseItem(
        item_id=str(item_id) if item_id is not None else None,
        item_name=str(item_name) if item_name is not None else None,
        quantity=_quantity(item.get("quantity")),
        price=to_number(first_present(item.get("price"), _shop_money(item, "price_set"))),
        item_brand=brand,
        item_variant=str(variant) if variant else None,
    )


def normalize_line_items(order: dict[str, Any]) -> list[PurchaseItem]:
    brand = _collection_brand(order)
    line_items = order.get("line_items")
    if not isinstance(line_items, list):
        return []
    return [normalize_line_item(item, brand) for item in line_items if isinstance(item, dict)]


def order_value(order: dict[str, Any]) -> float:
    return to_number(
        first_present(
            order.get("total_price"),
            order.get("current_total_price"),
            _shop_money(order, "total_price_set"),
        )
    )


def order_tax(order: dict[str, Any]) -> float:
    return to_number(order.get("total_tax"))


def order_shipping(order: dict[str, Any]) -> float:
    # No flat-field fallback exists for shipping.
    return to_number(_shop_money(order, "total_shipping_price_set"))


def order_currency(order: dict[str, Any]) -> str:
    currency = first_present(order.get("currency"), order.get("presentment_currency"))
    return str(currency) if currency else DEFAULT_CURRENCY


def order_coupon(order: dict[str, Any]) -> str | None:
    codes = order.get("discount_codes")
    if not isinstance(codes, list) or not codes:
        return None
    code = _as_dict(codes[0]).get("code")
    return str(code) if code else None


def build_measurement_payload(order: dict[str, Any]) -> MeasurementPayload:
    attrs = TrackingAttributes(order.get("note_attributes"))

    params = PurchaseParams(
        transaction_id=str(order["id"]),
        value=order_value(order),
        currency=order_currency(order),
        tax=order_tax(order),
        shipping=order_shipping(order),
        coupon=order_coupon(order),
        items=normalize_line_items(order),
        **extract_attribution(attrs),
    )
    return MeasurementPayload(
        client_id=resolve_client_id(order, attrs),
        user_id=resolve_user_id(order),
        events=[PurchaseEvent(params=params)],
    )


def map_order(raw_body: bytes) -> MeasurementPayload:
    return build_measurement_payload(decode_order(raw_body))
