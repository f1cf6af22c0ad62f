"""
Line Item Partitioner

Splits an order's open line items into the ones Shopify can fulfill for us
and the ones handled by hand (fulfillment_service == "manual").
"""
from dataclasses import dataclass, field
from typing import List

from app.schemas.pickup import MANUAL_FULFILLMENT_SERVICE, LineItem, Order


@dataclass
class PartitionedItems:
    auto_fulfillable: List[LineItem] = field(default_factory=list)
    manual: List[LineItem] = field(default_factory=list)

    @property
    def eligible(self) -> List[LineItem]:
        return self.auto_fulfillable + self.manual

    @property
    def is_empty(self) -> bool:
        return not self.auto_fulfillable and not self.manual


def is_eligible(item: LineItem) -> bool:
    """Open (unfulfilled) and with something left to hand over."""
    status = (item.fulfillment_status or "unfulfilled").lower()
    return status == "unfulfilled" and item.fulfillable_quantity > 0


def partition_line_items(order: Order) -> PartitionedItems:
    result = PartitionedItems()
    for item in order.line_items:
        if not is_eligible(item):
            continue
        if item.fulfillment_service == MANUAL_FULFILLMENT_SERVICE:
            result.manual.append(item)
        else:
            result.auto_fulfillable.append(item)
    return result
