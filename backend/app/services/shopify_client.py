"""
Shopify Admin API client

Thin wrapper over the REST endpoints the pickup flow needs. Every call carries
an explicit timeout; failures surface as the Shopify exceptions in
app.exceptions so callers never see raw requests exceptions.
"""
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from app.core.settings import settings
from app.exceptions import (
    ShopifyNotFoundError,
    ShopifyRejectedError,
    ShopifyTransportError,
)
from app.logging_config import get_logger
from app.schemas.pickup import FulfillmentRequest, Order
from app.services.pickup_token import canonical_order_id

logger = get_logger(__name__)


class ShopifyClient:
    """Synchronous Shopify Admin REST client."""

    def __init__(
        self,
        shop_name: Optional[str] = None,
        access_token: Optional[str] = None,
        api_version: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.shop_name = shop_name or settings.SHOP_NAME
        self.api_version = api_version or settings.SHOPIFY_API_VERSION
        self.timeout = timeout if timeout is not None else settings.SHOPIFY_TIMEOUT_SECONDS
        self.session = session or requests.Session()
        self.session.headers.update({
            "X-Shopify-Access-Token": access_token or settings.SHOPIFY_ADMIN_TOKEN or "",
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    @property
    def base_url(self) -> str:
        return f"https://{self.shop_name}/admin/api/{self.api_version}"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}/{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout:
            logger.warning(f"Shopify {method} {path} timed out after {self.timeout}s")
            raise ShopifyTransportError(
                f"{method} {path} timed out", timed_out=True
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"Shopify {method} {path} failed: {e}")
            raise ShopifyTransportError(f"{method} {path} failed: {e}")

        if response.status_code >= 500:
            logger.warning(
                f"Shopify {method} {path} returned {response.status_code}",
                extra={"body": response.text[:500]},
            )
            raise ShopifyTransportError(
                f"{method} {path} returned HTTP {response.status_code}",
                details={"upstream_status": response.status_code},
            )
        return response

    @staticmethod
    def _json(response: requests.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            raise ShopifyTransportError(
                "response body is not JSON",
                details={"upstream_status": response.status_code},
            )
        if not isinstance(data, dict):
            raise ShopifyTransportError("unexpected response shape")
        return data

    @staticmethod
    def _rejected(response: requests.Response) -> ShopifyRejectedError:
        errors: Any = None
        try:
            body = response.json()
            errors = body.get("errors", body) if isinstance(body, dict) else body
        except ValueError:
            errors = response.text or None
        return ShopifyRejectedError(response.status_code, errors)

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    @staticmethod
    def _order_path(order_id: Any, suffix: str) -> str:
        """Path under /orders/ for a canonical order id; other ids never reach Shopify."""
        canonical = canonical_order_id(order_id)
        if canonical is None:
            raise ShopifyNotFoundError("Order", str(order_id))
        return f"orders/{canonical}{suffix}"

    def fetch_order(self, order_id: str) -> Order:
        """
        GET /orders/{id}.json

        Raises:
            ShopifyNotFoundError: unknown order id
            ShopifyTransportError: network/5xx/malformed answer
            ShopifyRejectedError: any other 4xx (bad token, throttling)
        """
        response = self._request("GET", self._order_path(order_id, ".json"))
        if response.status_code == 404:
            raise ShopifyNotFoundError("Order", order_id)
        if response.status_code >= 400:
            raise self._rejected(response)

        order_data = self._json(response).get("order")
        if not order_data:
            raise ShopifyNotFoundError("Order", order_id)
        try:
            return Order.model_validate(order_data)
        except ValidationError as e:
            raise ShopifyTransportError(
                f"order {order_id} could not be parsed", details={"errors": e.errors()}
            )

    def list_fulfillment_locations(self) -> List[int]:
        """Active locations, in the order Shopify returns them."""
        response = self._request("GET", "locations.json")
        if response.status_code >= 400:
            raise self._rejected(response)
        locations = self._json(response).get("locations") or []
        return [
            int(loc["id"]) for loc in locations
            if loc.get("id") is not None and loc.get("active", True)
        ]

    def create_fulfillment(self, order_id: str, request: FulfillmentRequest) -> Dict[str, Any]:
        """
        POST /orders/{id}/fulfillments.json

        Never retried here: a timed-out POST may still have been applied.

        Raises:
            ShopifyRejectedError: 4xx answer (406, 422, ...)
            ShopifyTransportError: network/5xx/malformed answer
        """
        payload = request.to_payload()
        logger.debug(
            "Submitting fulfillment", extra={"order_id": str(order_id), "payload": payload}
        )
        response = self._request("POST", self._order_path(order_id, "/fulfillments.json"), json=payload)
        if response.status_code >= 400:
            raise self._rejected(response)
        # A 2xx is an accepted fulfillment even if the body is unreadable
        try:
            body = response.json()
        except ValueError:
            return {}
        return (body.get("fulfillment") if isinstance(body, dict) else None) or {}
