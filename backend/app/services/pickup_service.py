"""
Pickup Confirmation Service

Runs the customer pickup confirmation end to end:

    RECEIVED -> TOKEN_CHECKED -> LEDGER_CHECKED -> ORDER_FETCHED -> GATE_PASSED
             -> PARTITIONED -> LOCATED -> FULFILLING -> FULFILLED

Any step can end the flow with a rejection outcome instead. Every outcome,
including unexpected errors, is returned as a PickupResult; nothing raises to
the HTTP layer.

The only retries against the fulfillment endpoint are the fixed fallback
shapes tried after a 406. Timeouts and other failures are never retried, since
a repeated POST could fulfill the order twice.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Protocol, Tuple

from app.core.messages import OUTCOME_HTTP_STATUS, message_for
from app.core.settings import settings
from app.exceptions import (
    ShopifyError,
    ShopifyNotFoundError,
    ShopifyRejectedError,
    ShopifyTransportError,
)
from app.logging_config import get_logger
from app.schemas.pickup import (
    ALERTING_OUTCOMES,
    FulfillmentLineItem,
    FulfillmentRequest,
    LineItem,
    Order,
    PickupOutcome,
)
from app.services.line_item_partitioner import partition_line_items
from app.services.location_resolver import LocationResolver
from app.services.order_gate import check_order
from app.services.pickup_ledger import PickupLedger
from app.services.pickup_token import canonical_order_id, verify_token

logger = get_logger(__name__)

NOT_ACCEPTABLE = 406
UNPROCESSABLE_ENTITY = 422

_LINE_ITEM_MARKERS = ("line_item", "line item", "fulfillable")


class PickupState(str, Enum):
    RECEIVED = "received"
    TOKEN_CHECKED = "token_checked"
    LEDGER_CHECKED = "ledger_checked"
    ORDER_FETCHED = "order_fetched"
    GATE_PASSED = "gate_passed"
    PARTITIONED = "partitioned"
    LOCATED = "located"
    FULFILLING = "fulfilling"
    FULFILLED = "fulfilled"


class FulfillmentGateway(Protocol):
    def fetch_order(self, order_id: str) -> Order:
        ...

    def list_fulfillment_locations(self) -> List[int]:
        ...

    def create_fulfillment(self, order_id: str, request: FulfillmentRequest) -> Any:
        ...


@dataclass
class PickupResult:
    outcome: PickupOutcome
    http_status: int
    message: str
    order_id: Optional[str] = None
    location_id: Optional[int] = None
    fulfillment_attempts: int = 0
    manual_items: List[LineItem] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outcome in (PickupOutcome.FULFILLED, PickupOutcome.READY)


def build_fulfillment_attempts(
    items: List[LineItem],
    location_id: Optional[int],
    message: Optional[str],
) -> List[Tuple[str, FulfillmentRequest]]:
    """
    Primary request followed by the fallback shapes, most specific first.

    Each entry is a fresh request; later shapes let Shopify infer what the
    earlier ones spelled out.
    """
    line_items = [
        FulfillmentLineItem(id=item.id, quantity=item.fulfillable_quantity) for item in items
    ]
    return [
        ("primary", FulfillmentRequest(
            location_id=location_id, line_items=line_items,
            notify_customer=True, message=message,
        )),
        ("without_line_items", FulfillmentRequest(
            location_id=location_id, notify_customer=True, message=message,
        )),
        ("without_location", FulfillmentRequest(notify_customer=True, message=message)),
        ("notify_only", FulfillmentRequest(notify_customer=True)),
    ]


def classify_rejection(error: ShopifyRejectedError) -> PickupOutcome:
    """Map a non-406 fulfillment rejection to an outcome."""
    if error.upstream_status != UNPROCESSABLE_ENTITY:
        return PickupOutcome.UPSTREAM_ERROR

    texts = [f.lower() for f in error.error_fields()]
    texts += [m.lower() for m in error.error_messages()]
    if any(marker in text for text in texts for marker in _LINE_ITEM_MARKERS):
        return PickupOutcome.ITEMS_UNAVAILABLE
    return PickupOutcome.ORDER_PROCESSING_ERROR


class PickupService:
    """Pickup confirmation orchestrator. One instance serves all requests."""

    def __init__(
        self,
        client: FulfillmentGateway,
        ledger: PickupLedger,
        location_resolver: LocationResolver,
        *,
        locale: Optional[str] = None,
        fulfillment_message: Optional[str] = None,
        lock_timeout: Optional[float] = None,
        token_algorithm: Optional[str] = None,
    ):
        self.client = client
        self.ledger = ledger
        self.location_resolver = location_resolver
        self.locale = locale or settings.PICKUP_LOCALE
        self.fulfillment_message = (
            fulfillment_message if fulfillment_message is not None
            else settings.PICKUP_FULFILLMENT_MESSAGE
        )
        self.lock_timeout = (
            lock_timeout if lock_timeout is not None else settings.PICKUP_LOCK_TIMEOUT_SECONDS
        )
        self.token_algorithm = token_algorithm

    # ========================================================================
    # PUBLIC API
    # ========================================================================

    def confirm_pickup(self, order_id: Any, token: Optional[str]) -> PickupResult:
        """
        Confirm a pickup and fulfill the order in Shopify, at most once.

        Args:
            order_id: Shopify order id from the pickup link
            token: token presented with the link

        Returns:
            PickupResult with the outcome, HTTP status and shopper message
        """
        self._transition(PickupState.RECEIVED, order_id)
        order_id, checked = self._check_link(order_id, token)
        if checked is not None:
            return checked

        try:
            with self.ledger.hold(order_id, timeout=self.lock_timeout) as acquired:
                if not acquired:
                    return self._result(PickupOutcome.BUSY, order_id)
                if self.ledger.is_confirmed(order_id):
                    return self._result(PickupOutcome.ALREADY_CONFIRMED, order_id)
                self._transition(PickupState.LEDGER_CHECKED, order_id)
                return self._fulfill(order_id)
        except Exception:
            logger.exception(f"Unexpected error confirming pickup for order {order_id}")
            return self._result(PickupOutcome.INTERNAL, order_id)

    def preview(self, order_id: Any, token: Optional[str]) -> PickupResult:
        """
        Read-only checks behind the confirmation page.

        Returns READY when the shopper may confirm; makes no Shopify mutation
        and does not take the per-order lock.
        """
        order_id, checked = self._check_link(order_id, token)
        if checked is not None:
            return checked
        if self.ledger.is_confirmed(order_id):
            return self._result(PickupOutcome.ALREADY_CONFIRMED, order_id)

        try:
            order, failure = self._load_order(order_id)
            if failure is not None:
                return self._result(failure, order_id)
            rejection = check_order(order)
            if rejection is not None:
                return self._result(rejection, order_id)
        except Exception:
            logger.exception(f"Unexpected error previewing pickup for order {order_id}")
            return self._result(PickupOutcome.INTERNAL, order_id)
        return self._result(PickupOutcome.READY, order_id)

    # ========================================================================
    # STEPS
    # ========================================================================

    def _check_link(
        self, raw_order_id: Any, token: Optional[str]
    ) -> Tuple[Optional[str], Optional[PickupResult]]:
        """
        Canonicalise the order id and verify the token against it.

        The canonical id is what the token, the ledger and the Shopify URLs
        all use; anything that is not a plain decimal id is a bad request.
        """
        order_id = canonical_order_id(raw_order_id)
        token = (token or "").strip()
        if order_id is None or not token:
            return None, self._result(PickupOutcome.BAD_REQUEST, None)
        if not verify_token(order_id, token, self.token_algorithm):
            return order_id, self._result(PickupOutcome.INVALID_TOKEN, order_id)
        self._transition(PickupState.TOKEN_CHECKED, order_id)
        return order_id, None

    def _load_order(self, order_id: str) -> Tuple[Optional[Order], Optional[PickupOutcome]]:
        try:
            order = self.client.fetch_order(order_id)
        except ShopifyNotFoundError:
            return None, PickupOutcome.ORDER_NOT_FOUND
        except ShopifyError as e:
            logger.error(
                f"Could not fetch order {order_id}: {e.message}",
                extra={"order_id": order_id, "details": e.details},
            )
            return None, PickupOutcome.UPSTREAM_ERROR
        self._transition(PickupState.ORDER_FETCHED, order_id)
        return order, None

    def _fulfill(self, order_id: str) -> PickupResult:
        """Steps after the ledger check; runs while holding the order lock."""
        order, failure = self._load_order(order_id)
        if failure is not None:
            return self._result(failure, order_id)

        rejection = check_order(order)
        if rejection is not None:
            return self._result(rejection, order_id)
        self._transition(PickupState.GATE_PASSED, order_id)

        items = partition_line_items(order)
        if items.is_empty:
            return self._result(PickupOutcome.NO_FULFILLABLE_ITEMS, order_id)
        self._transition(PickupState.PARTITIONED, order_id)

        location_id = self.location_resolver.resolve(order)
        if location_id is None:
            return self._result(PickupOutcome.LOCATION_UNRESOLVED, order_id)
        self._transition(PickupState.LOCATED, order_id)

        attempts = 0
        if items.auto_fulfillable:
            self._transition(PickupState.FULFILLING, order_id)
            outcome, attempts = self._submit(order_id, items.auto_fulfillable, location_id)
            if outcome != PickupOutcome.FULFILLED:
                return self._result(
                    outcome, order_id, location_id=location_id, fulfillment_attempts=attempts
                )
        else:
            logger.info(
                f"Order {order_id} has only manual items; no Shopify fulfillment sent",
                extra={"order_id": order_id},
            )

        self.ledger.mark_confirmed(order_id)
        if items.manual:
            logger.info(
                f"Manual items picked up for order {order_id}",
                extra={
                    "order_id": order_id,
                    "manual_items": [item.title or str(item.id) for item in items.manual],
                },
            )
        self._transition(PickupState.FULFILLED, order_id)
        return self._result(
            PickupOutcome.FULFILLED,
            order_id,
            location_id=location_id,
            fulfillment_attempts=attempts,
            manual_items=items.manual,
        )

    def _submit(
        self,
        order_id: str,
        items: List[LineItem],
        location_id: int,
    ) -> Tuple[PickupOutcome, int]:
        """
        Send the primary fulfillment, walking the fallback shapes on 406.

        Returns the outcome and the number of POSTs sent.
        """
        attempts = build_fulfillment_attempts(items, location_id, self.fulfillment_message)
        sent = 0
        for shape, request in attempts:
            sent += 1
            try:
                self.client.create_fulfillment(order_id, request)
            except ShopifyRejectedError as e:
                if e.upstream_status == NOT_ACCEPTABLE:
                    logger.warning(
                        f"Fulfillment shape '{shape}' not accepted for order {order_id}",
                        extra={"order_id": order_id, "shape": shape, "errors": e.errors},
                    )
                    continue
                outcome = classify_rejection(e)
                logger.warning(
                    f"Fulfillment rejected for order {order_id}: {outcome.value}",
                    extra={
                        "order_id": order_id,
                        "shape": shape,
                        "upstream_status": e.upstream_status,
                        "errors": e.errors,
                    },
                )
                return outcome, sent
            except ShopifyTransportError as e:
                if e.timed_out:
                    logger.error(
                        f"Fulfillment for order {order_id} timed out; Shopify may have "
                        f"applied it, manual reconciliation may be needed",
                        extra={"order_id": order_id, "shape": shape},
                    )
                return PickupOutcome.UPSTREAM_ERROR, sent
            except ShopifyError as e:
                logger.error(
                    f"Fulfillment failed for order {order_id}: {e.message}",
                    extra={"order_id": order_id, "shape": shape},
                )
                return PickupOutcome.UPSTREAM_ERROR, sent

            if shape != "primary":
                logger.info(
                    f"Order {order_id} fulfilled with fallback shape '{shape}'",
                    extra={"order_id": order_id, "shape": shape},
                )
            return PickupOutcome.FULFILLED, sent

        logger.warning(
            f"All fulfillment shapes rejected for order {order_id}",
            extra={"order_id": order_id, "attempts": sent},
        )
        return PickupOutcome.UPSTREAM_REJECTED, sent

    # ========================================================================
    # HELPERS
    # ========================================================================

    def _transition(self, state: PickupState, order_id: str) -> None:
        logger.debug(f"Pickup {order_id or '-'} -> {state.value}")

    def _result(self, outcome: PickupOutcome, order_id: Optional[str], **kwargs) -> PickupResult:
        if outcome in ALERTING_OUTCOMES:
            logger.error(f"Pickup for order {order_id} ended with {outcome.value}",
                         extra={"order_id": order_id, "outcome": outcome.value})
        elif outcome not in (PickupOutcome.FULFILLED, PickupOutcome.READY):
            logger.info(f"Pickup for order {order_id} rejected: {outcome.value}",
                        extra={"order_id": order_id, "outcome": outcome.value})
        return PickupResult(
            outcome=outcome,
            http_status=OUTCOME_HTTP_STATUS[outcome],
            message=message_for(outcome, self.locale),
            order_id=order_id,
            **kwargs,
        )
