"""Shopper-facing messages and HTTP statuses per pickup outcome"""
from typing import Dict

from app.schemas.pickup import PickupOutcome


OUTCOME_HTTP_STATUS: Dict[PickupOutcome, int] = {
    PickupOutcome.FULFILLED: 200,
    PickupOutcome.READY: 200,
    PickupOutcome.BAD_REQUEST: 400,
    PickupOutcome.INVALID_TOKEN: 403,
    PickupOutcome.ALREADY_CONFIRMED: 200,  # idempotent
    PickupOutcome.BUSY: 409,
    PickupOutcome.ORDER_NOT_FOUND: 404,
    PickupOutcome.ALREADY_FULFILLED: 200,  # idempotent
    PickupOutcome.PAYMENT_INCOMPLETE: 403,
    PickupOutcome.NO_FULFILLABLE_ITEMS: 400,
    PickupOutcome.LOCATION_UNRESOLVED: 500,
    PickupOutcome.ITEMS_UNAVAILABLE: 409,
    PickupOutcome.ORDER_PROCESSING_ERROR: 422,
    PickupOutcome.UPSTREAM_REJECTED: 502,
    PickupOutcome.UPSTREAM_ERROR: 502,
    PickupOutcome.INTERNAL: 500,
}


MESSAGES: Dict[str, Dict[PickupOutcome, str]] = {
    "he": {
        PickupOutcome.FULFILLED: "✅ האיסוף אושר בהצלחה!",
        PickupOutcome.READY: "האם לאשר את האיסוף?",
        PickupOutcome.BAD_REQUEST: "❌ בקשה לא חוקית: חסר order_id או token",
        PickupOutcome.INVALID_TOKEN: "❌ הקישור אינו חוקי או פג תוקף",
        PickupOutcome.ALREADY_CONFIRMED: "❌ הקישור פג תוקף - האיסוף כבר אושר",
        PickupOutcome.BUSY: "⏳ האיסוף נמצא בתהליך אישור. נסה שוב בעוד מספר שניות.",
        PickupOutcome.ORDER_NOT_FOUND: "❌ ההזמנה לא נמצאה",
        PickupOutcome.ALREADY_FULFILLED: "✅ ההזמנה כבר נאספה",
        PickupOutcome.PAYMENT_INCOMPLETE: "❌ לא ניתן לאשר את האיסוף - התשלום לא בוצע",
        PickupOutcome.NO_FULFILLABLE_ITEMS: "❌ אין פריטים זמינים למילוי",
        PickupOutcome.LOCATION_UNRESOLVED: "❌ לא ניתן לקבוע את נקודת האיסוף. צור קשר עם החנות.",
        PickupOutcome.ITEMS_UNAVAILABLE: "❌ חלק מהפריטים אינם זמינים למילוי. צור קשר עם החנות.",
        PickupOutcome.ORDER_PROCESSING_ERROR: "❌ לא ניתן לעבד את ההזמנה. צור קשר עם החנות.",
        PickupOutcome.UPSTREAM_REJECTED: "❌ שגיאה בביצוע האיסוף",
        PickupOutcome.UPSTREAM_ERROR: "❌ שגיאה בביצוע האיסוף. נסה שוב מאוחר יותר.",
        PickupOutcome.INTERNAL: "❌ שגיאה בשרת. נסה שוב מאוחר יותר.",
    },
    "en": {
        PickupOutcome.FULFILLED: "✅ Pickup confirmed successfully!",
        PickupOutcome.READY: "Confirm pickup?",
        PickupOutcome.BAD_REQUEST: "❌ Invalid request: order_id or token missing",
        PickupOutcome.INVALID_TOKEN: "❌ This link is invalid or has expired",
        PickupOutcome.ALREADY_CONFIRMED: "❌ This link has expired - pickup was already confirmed",
        PickupOutcome.BUSY: "⏳ Pickup confirmation is in progress. Try again in a few seconds.",
        PickupOutcome.ORDER_NOT_FOUND: "❌ Order not found",
        PickupOutcome.ALREADY_FULFILLED: "✅ This order has already been picked up",
        PickupOutcome.PAYMENT_INCOMPLETE: "❌ Pickup cannot be confirmed - payment not completed",
        PickupOutcome.NO_FULFILLABLE_ITEMS: "❌ No items available for fulfillment",
        PickupOutcome.LOCATION_UNRESOLVED: "❌ Pickup location could not be determined. Please contact the store.",
        PickupOutcome.ITEMS_UNAVAILABLE: "❌ Some items can no longer be fulfilled. Please contact the store.",
        PickupOutcome.ORDER_PROCESSING_ERROR: "❌ The order could not be processed. Please contact the store.",
        PickupOutcome.UPSTREAM_REJECTED: "❌ Pickup could not be completed",
        PickupOutcome.UPSTREAM_ERROR: "❌ Pickup could not be completed. Please try again later.",
        PickupOutcome.INTERNAL: "❌ Server error. Please try again later.",
    },
}


def message_for(outcome: PickupOutcome, locale: str = "he") -> str:
    """Look up the shopper message, falling back to Hebrew for unknown locales."""
    catalogue = MESSAGES.get(locale, MESSAGES["he"])
    return catalogue[outcome]


# Confirmation page chrome (text direction, button and script status lines)
PAGE_TEXT: Dict[str, Dict[str, str]] = {
    "he": {
        "direction": "rtl",
        "confirm_button": "אישור איסוף",
        "pending": "⏳ מתבצע אישור האיסוף...",
        "failed": "❌ שגיאה בביצוע האיסוף. נסה שוב מאוחר יותר.",
    },
    "en": {
        "direction": "ltr",
        "confirm_button": "Confirm pickup",
        "pending": "⏳ Confirming pickup...",
        "failed": "❌ Pickup could not be completed. Please try again later.",
    },
}


def page_text(locale: str = "he") -> Dict[str, str]:
    return PAGE_TEXT.get(locale, PAGE_TEXT["he"])
