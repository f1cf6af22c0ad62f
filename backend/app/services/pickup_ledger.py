"""
Pickup Ledger

Process-wide record of orders whose pickup has been confirmed, plus one lock
per order id so that only one confirmation per order is in flight.

The ledger lives in memory only. A restart forgets every confirmation, and
running more than one instance breaks the single-use guarantee; Shopify's own
fulfillment_status remains the backstop in both cases.
"""
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from app.logging_config import get_logger

logger = get_logger(__name__)


class PickupLedger:
    """
    Keyed store of confirmed orders with a per-key mutual-exclusion contract.

    Callers must wrap check-then-mark in ``hold(order_id)``:

        with ledger.hold(order_id, timeout=30) as acquired:
            if not acquired:
                ...  # another confirmation for this order is still running
            if ledger.is_confirmed(order_id):
                ...
            ...
            ledger.mark_confirmed(order_id)
    """

    def __init__(self):
        self._confirmed: Dict[str, bool] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, order_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(order_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[order_id] = lock
            return lock

    @contextmanager
    def hold(self, order_id: str, timeout: Optional[float] = None) -> Iterator[bool]:
        """
        Hold the lock for one order id.

        Yields True once acquired, or False if ``timeout`` seconds passed first.
        ``timeout=None`` waits forever.
        """
        lock = self._lock_for(str(order_id))
        acquired = lock.acquire(timeout=-1 if timeout is None else timeout)
        try:
            yield acquired
        finally:
            if acquired:
                lock.release()

    def is_confirmed(self, order_id: str) -> bool:
        with self._guard:
            return self._confirmed.get(str(order_id), False)

    def mark_confirmed(self, order_id: str) -> None:
        """Only call after Shopify accepted the fulfillment."""
        with self._guard:
            self._confirmed[str(order_id)] = True
        logger.info("Pickup marked as confirmed", extra={"order_id": str(order_id)})

    def __len__(self) -> int:
        with self._guard:
            return len(self._confirmed)
