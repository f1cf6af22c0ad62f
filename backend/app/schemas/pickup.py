"""
Pickup Schemas

Order snapshots parsed from the Shopify Admin API, the fulfillment payload
sent back to it, and the request/response bodies of the pickup routes.
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

MANUAL_FULFILLMENT_SERVICE = "manual"


class PickupOutcome(str, Enum):
    """Terminal result of a pickup confirmation (or preview)."""
    FULFILLED = "FULFILLED"
    READY = "READY"  # preview only: the shopper may confirm
    BAD_REQUEST = "BAD_REQUEST"
    INVALID_TOKEN = "INVALID_TOKEN"
    ALREADY_CONFIRMED = "ALREADY_CONFIRMED"
    BUSY = "BUSY"
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    ALREADY_FULFILLED = "ALREADY_FULFILLED"
    PAYMENT_INCOMPLETE = "PAYMENT_INCOMPLETE"
    NO_FULFILLABLE_ITEMS = "NO_FULFILLABLE_ITEMS"
    LOCATION_UNRESOLVED = "LOCATION_UNRESOLVED"
    ITEMS_UNAVAILABLE = "ITEMS_UNAVAILABLE"
    ORDER_PROCESSING_ERROR = "ORDER_PROCESSING_ERROR"
    UPSTREAM_REJECTED = "UPSTREAM_REJECTED"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    INTERNAL = "INTERNAL"


# Outcomes an operator should be alerted about; everything else is normal traffic
ALERTING_OUTCOMES = frozenset({PickupOutcome.UPSTREAM_ERROR, PickupOutcome.INTERNAL})


class _ShopifyModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class ShippingLine(_ShopifyModel):
    """Shipping method chosen at checkout; only used as a location hint."""
    title: Optional[str] = None
    code: Optional[str] = None


class LineItem(_ShopifyModel):
    id: int
    title: Optional[str] = None
    quantity: int = 0
    fulfillable_quantity: int = Field(default=0, ge=0)
    fulfillment_status: Optional[str] = None  # None/"unfulfilled", "fulfilled", ...
    fulfillment_service: Optional[str] = None  # "manual" is never sent to Shopify


class Order(_ShopifyModel):
    """Read-only snapshot of a Shopify order."""
    id: int
    name: Optional[str] = None  # display number, e.g. "#1001"
    financial_status: Optional[str] = None
    fulfillment_status: Optional[str] = None
    location_id: Optional[int] = None
    line_items: List[LineItem] = Field(default_factory=list)
    shipping_lines: List[ShippingLine] = Field(default_factory=list)


class FulfillmentLineItem(BaseModel):
    id: int
    quantity: int


class FulfillmentRequest(BaseModel):
    """
    Body of POST /orders/{id}/fulfillments.json.

    Unset fields are left out of the payload so each fallback shape is a
    distinct request rather than the primary one with nulls.
    """
    location_id: Optional[int] = None
    line_items: Optional[List[FulfillmentLineItem]] = None
    notify_customer: bool = True
    message: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {"fulfillment": self.model_dump(exclude_none=True)}


class PickupConfirmRequest(BaseModel):
    """Body of the pickup execute routes (JSON or form)."""
    order_id: Optional[str] = None
    token: Optional[str] = None


class PickupConfirmResponse(BaseModel):
    outcome: PickupOutcome
    message: str


class PickupLinkResponse(BaseModel):
    order_id: str
    token: str
    url: str
