"""
Order State Gate

Decides whether a fetched order may be picked up. Fulfillment is checked
before payment: an order someone already marked fulfilled by hand must read
as "already picked up", never as "payment incomplete".
"""
from typing import Optional

from app.schemas.pickup import Order, PickupOutcome


def check_order(order: Order) -> Optional[PickupOutcome]:
    """Return the rejection outcome, or None when the order may proceed."""
    if (order.fulfillment_status or "").lower() == "fulfilled":
        return PickupOutcome.ALREADY_FULFILLED
    if (order.financial_status or "").lower() != "paid":
        return PickupOutcome.PAYMENT_INCOMPLETE
    return None
