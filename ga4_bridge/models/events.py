from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ATTRIBUTION_KEYS: tuple[str, ...] = (
    "gclid",
    "gbraid",
    "wbraid",
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_content",
    "utm_term",
)


class PurchaseItem(BaseModel):
    model_config = ConfigDict(extra="forbid")

    item_id: str | None = None
    item_name: str | None = None
    quantity: int = Field(default=1, ge=1)
    price: float = 0
    item_brand: str | None = None
    item_variant: str | None = None


class PurchaseParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    transaction_id: str
    value: float = 0
    currency: str = "INR"
    tax: float = 0
    shipping: float = 0
    coupon: str | None = None
    items: list[PurchaseItem] = Field(default_factory=list)

    gclid: str | None = None
    gbraid: str | None = None
    wbraid: str | None = None
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None
    utm_content: str | None = None
    utm_term: str | None = None


class PurchaseEvent(BaseModel):
    name: Literal["purchase"] = "purchase"
    params: PurchaseParams


class MeasurementPayload(BaseModel):
    """Measurement Protocol request body carrying a single purchase event."""

    client_id: str = Field(min_length=1)
    user_id: str | None = None
    non_personalized_ads: bool = False
    events: list[PurchaseEvent] = Field(min_length=1, max_length=1)

    @property
    def purchase(self) -> PurchaseParams:
        return self.events[0].params

    def to_wire(self) -> dict[str, Any]:
        # Absent optional fields are dropped, never sent as null.
        return self.model_dump(mode="json", exclude_none=True)
