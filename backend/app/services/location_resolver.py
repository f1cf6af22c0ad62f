"""
Location Resolver

Picks the Shopify location a pickup is fulfilled from:

1. the location already assigned to the order;
2. a keyword match on the first shipping line ("warehouse" vs "store" pickup);
3. the configured default location;
4. with nothing configured, the first location Shopify lists.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from app.core.settings import Settings
from app.exceptions import ShopifyError
from app.logging_config import get_logger
from app.schemas.pickup import Order, ShippingLine

logger = get_logger(__name__)


class LocationSource(Protocol):
    def list_fulfillment_locations(self) -> List[int]:
        ...


@dataclass
class LocationConfig:
    store_location_id: Optional[int] = None
    warehouse_location_id: Optional[int] = None
    default_location_id: Optional[int] = None
    warehouse_keywords: List[str] = field(default_factory=list)
    store_keywords: List[str] = field(default_factory=list)

    @classmethod
    def from_settings(cls, settings: Settings) -> "LocationConfig":
        return cls(
            store_location_id=settings.PICKUP_STORE_LOCATION_ID,
            warehouse_location_id=settings.PICKUP_WAREHOUSE_LOCATION_ID,
            default_location_id=settings.default_location_id,
            warehouse_keywords=list(settings.PICKUP_WAREHOUSE_KEYWORDS),
            store_keywords=list(settings.PICKUP_STORE_KEYWORDS),
        )


def _matches(shipping_line: ShippingLine, keywords: List[str]) -> bool:
    title = shipping_line.title or ""
    for keyword in keywords:
        if keyword and (keyword in title or shipping_line.code == keyword):
            return True
    return False


class LocationResolver:

    def __init__(self, config: LocationConfig, source: LocationSource):
        self.config = config
        self.source = source

    def match_shipping_line(self, order: Order) -> Optional[int]:
        """Location named by the first shipping line, if a keyword matches."""
        if not order.shipping_lines:
            return None
        shipping_line = order.shipping_lines[0]
        candidates = (
            (self.config.warehouse_keywords, self.config.warehouse_location_id),
            (self.config.store_keywords, self.config.store_location_id),
        )
        for keywords, location_id in candidates:
            if location_id is not None and _matches(shipping_line, keywords):
                return location_id
        return None

    def resolve(self, order: Order) -> Optional[int]:
        """
        Returns the location id, or None when nothing could be resolved
        (the remote lookup failed or Shopify has no active location).
        """
        if order.location_id is not None:
            return order.location_id

        location_id = self.match_shipping_line(order)
        if location_id is not None:
            return location_id

        if self.config.default_location_id is not None:
            return self.config.default_location_id

        try:
            locations = self.source.list_fulfillment_locations()
        except ShopifyError as e:
            logger.warning(
                f"Location lookup failed for order {order.id}: {e.message}",
                extra={"order_id": str(order.id)},
            )
            return None
        if not locations:
            logger.warning("Shopify returned no active locations", extra={"order_id": str(order.id)})
            return None
        return locations[0]
