"""
Pickup Token Service

A pickup token is a plain digest of the order id: it is recomputed on every
request and never stored. Possession of the link is the only credential, so
links must only travel through private channels (order e-mail / SMS).
"""
import hashlib
import hmac
from typing import Any, Optional
from urllib.parse import urlencode

from app.core.settings import settings


def canonical_order_id(order_id: Any) -> Optional[str]:
    """
    Decimal string form of a Shopify order id, or None if it is not one.

    Leading zeros and surrounding whitespace are dropped, so "01001" and
    1001 both become "1001".
    """
    if order_id is None or isinstance(order_id, bool):
        return None
    text = str(order_id).strip()
    if not text.isascii() or not text.isdigit():
        return None
    return str(int(text))


def derive_token(order_id: Any, algorithm: Optional[str] = None) -> str:
    """Deterministic hex digest of the order id's canonical string form."""
    digest = hashlib.new(algorithm or settings.PICKUP_TOKEN_ALGORITHM)
    digest.update(str(order_id).encode("utf-8"))
    return digest.hexdigest()


def verify_token(order_id: Any, presented: Optional[str], algorithm: Optional[str] = None) -> bool:
    if not presented:
        return False
    expected = derive_token(order_id, algorithm)
    return hmac.compare_digest(expected.encode("utf-8"), str(presented).encode("utf-8"))


def build_pickup_link(order_id: Any, base_url: Optional[str] = None) -> str:
    """Shopper-facing confirmation URL for an order."""
    base = (base_url or settings.PUBLIC_BASE_URL).rstrip("/")
    query = urlencode({"order_id": str(order_id), "token": derive_token(order_id)})
    return f"{base}/pickup/confirm?{query}"
