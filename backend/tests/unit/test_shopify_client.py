"""
Unit Tests for the Shopify Admin API client

The requests session is a MagicMock; no network access.
"""
from unittest.mock import MagicMock

import pytest
import requests

from app.exceptions import (
    ShopifyNotFoundError,
    ShopifyRejectedError,
    ShopifyTransportError,
)
from app.schemas.pickup import FulfillmentLineItem, FulfillmentRequest
from app.services.shopify_client import ShopifyClient
from tests.factories import create_test_order, shopify_order_payload


def _response(status_code=200, body=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def session():
    mock = MagicMock()
    mock.headers = {}
    return mock


@pytest.fixture
def shopify(session):
    return ShopifyClient(
        shop_name="test-shop.myshopify.com",
        access_token="shpat_test",
        api_version="2025-07",
        timeout=3,
        session=session,
    )


class TestClientSetup:

    def test_sets_auth_headers(self, shopify, session):
        assert session.headers["X-Shopify-Access-Token"] == "shpat_test"
        assert session.headers["Accept"] == "application/json"

    def test_base_url(self, shopify):
        assert shopify.base_url == "https://test-shop.myshopify.com/admin/api/2025-07"


class TestFetchOrder:

    def test_parses_order(self, shopify, session):
        order = create_test_order(order_id=1001)
        session.request.return_value = _response(200, shopify_order_payload(order))

        fetched = shopify.fetch_order("1001")

        assert fetched.id == 1001
        assert fetched.financial_status == "paid"
        session.request.assert_called_once_with(
            "GET",
            "https://test-shop.myshopify.com/admin/api/2025-07/orders/1001.json",
            timeout=3,
        )

    def test_canonicalises_order_id_in_url(self, shopify, session):
        session.request.return_value = _response(
            200, shopify_order_payload(create_test_order(order_id=1001))
        )

        shopify.fetch_order(" 01001")

        assert session.request.call_args.args[1].endswith("/orders/1001.json")

    @pytest.mark.parametrize("order_id", ["1001.json?fields=id#", "../shop", "1001/fulfillments"])
    def test_non_numeric_id_never_reaches_shopify(self, shopify, session, order_id):
        with pytest.raises(ShopifyNotFoundError):
            shopify.fetch_order(order_id)
        session.request.assert_not_called()

    def test_ignores_unknown_fields(self, shopify, session):
        payload = shopify_order_payload(create_test_order(order_id=1001))
        payload["order"]["customer"] = {"id": 1, "email": "a@example.com"}
        session.request.return_value = _response(200, payload)

        assert shopify.fetch_order("1001").id == 1001

    def test_shipping_line_without_title(self, shopify, session):
        payload = shopify_order_payload(create_test_order(order_id=1001))
        payload["order"]["shipping_lines"] = [{"title": None, "code": "מחסן"}]
        session.request.return_value = _response(200, payload)

        order = shopify.fetch_order("1001")

        assert order.shipping_lines[0].title is None
        assert order.shipping_lines[0].code == "מחסן"

    def test_404_raises_not_found(self, shopify, session):
        session.request.return_value = _response(404, {"errors": "Not Found"})
        with pytest.raises(ShopifyNotFoundError):
            shopify.fetch_order("404404")

    def test_timeout_raises_transport_error(self, shopify, session):
        session.request.side_effect = requests.exceptions.Timeout()
        with pytest.raises(ShopifyTransportError) as exc_info:
            shopify.fetch_order("1001")
        assert exc_info.value.timed_out is True

    def test_connection_error_raises_transport_error(self, shopify, session):
        session.request.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(ShopifyTransportError) as exc_info:
            shopify.fetch_order("1001")
        assert exc_info.value.timed_out is False

    def test_server_error_raises_transport_error(self, shopify, session):
        session.request.return_value = _response(503, text="unavailable")
        with pytest.raises(ShopifyTransportError):
            shopify.fetch_order("1001")

    def test_malformed_body_raises_transport_error(self, shopify, session):
        session.request.return_value = _response(200, ValueError("no json"))
        with pytest.raises(ShopifyTransportError):
            shopify.fetch_order("1001")

    def test_unauthorized_raises_rejected(self, shopify, session):
        session.request.return_value = _response(401, {"errors": "Invalid API key"})
        with pytest.raises(ShopifyRejectedError) as exc_info:
            shopify.fetch_order("1001")
        assert exc_info.value.upstream_status == 401


class TestListLocations:

    def test_returns_active_location_ids(self, shopify, session):
        session.request.return_value = _response(200, {"locations": [
            {"id": 1, "active": True},
            {"id": 2, "active": False},
            {"id": 3},
        ]})
        assert shopify.list_fulfillment_locations() == [1, 3]


class TestCreateFulfillment:

    def test_posts_payload(self, shopify, session):
        session.request.return_value = _response(201, {"fulfillment": {"id": 77}})
        request = FulfillmentRequest(
            location_id=10,
            line_items=[FulfillmentLineItem(id=1, quantity=2)],
            notify_customer=True,
            message="Pickup confirmed by customer",
        )

        result = shopify.create_fulfillment("1001", request)

        assert result == {"id": 77}
        session.request.assert_called_once_with(
            "POST",
            "https://test-shop.myshopify.com/admin/api/2025-07/orders/1001/fulfillments.json",
            timeout=3,
            json={"fulfillment": {
                "location_id": 10,
                "line_items": [{"id": 1, "quantity": 2}],
                "notify_customer": True,
                "message": "Pickup confirmed by customer",
            }},
        )

    def test_minimal_shape_omits_unset_fields(self, shopify, session):
        session.request.return_value = _response(201, {"fulfillment": {"id": 78}})

        shopify.create_fulfillment("1001", FulfillmentRequest(notify_customer=True))

        assert session.request.call_args.kwargs["json"] == {
            "fulfillment": {"notify_customer": True}
        }

    def test_accepted_without_json_body(self, shopify, session):
        session.request.return_value = _response(201, ValueError("empty"))
        assert shopify.create_fulfillment("1001", FulfillmentRequest()) == {}

    def test_406_raises_rejected(self, shopify, session):
        session.request.return_value = _response(406, ValueError("html"), text="Not Acceptable")
        with pytest.raises(ShopifyRejectedError) as exc_info:
            shopify.create_fulfillment("1001", FulfillmentRequest())
        assert exc_info.value.upstream_status == 406
        assert exc_info.value.errors == "Not Acceptable"

    def test_422_keeps_error_payload(self, shopify, session):
        errors = {"line_items": ["are not fulfillable"]}
        session.request.return_value = _response(422, {"errors": errors})
        with pytest.raises(ShopifyRejectedError) as exc_info:
            shopify.create_fulfillment("1001", FulfillmentRequest())
        assert exc_info.value.errors == errors
        assert exc_info.value.error_messages() == ["line_items: are not fulfillable"]

    def test_timeout_is_not_retried(self, shopify, session):
        session.request.side_effect = requests.exceptions.Timeout()
        with pytest.raises(ShopifyTransportError):
            shopify.create_fulfillment("1001", FulfillmentRequest())
        assert session.request.call_count == 1

    def test_non_numeric_id_is_not_posted(self, shopify, session):
        with pytest.raises(ShopifyNotFoundError):
            shopify.create_fulfillment("1001.json?x=", FulfillmentRequest())
        session.request.assert_not_called()
