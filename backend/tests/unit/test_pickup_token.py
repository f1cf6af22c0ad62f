"""
Unit Tests for pickup token derivation and verification
"""
import hashlib
from urllib.parse import parse_qs, urlparse

import pytest

from app.services.pickup_token import (
    build_pickup_link,
    canonical_order_id,
    derive_token,
    verify_token,
)


class TestDeriveToken:

    def test_matches_sha1_of_order_id(self):
        """Links sent by the previous deployment (sha1 of the id) stay valid."""
        expected = hashlib.sha1(b"1001").hexdigest()
        assert derive_token("1001", "sha1") == expected

    def test_is_deterministic(self):
        assert derive_token("1001", "sha1") == derive_token("1001", "sha1")

    def test_int_and_str_ids_share_a_token(self):
        assert derive_token(1001, "sha1") == derive_token("1001", "sha1")

    def test_different_orders_get_different_tokens(self):
        assert derive_token("1001", "sha1") != derive_token("1002", "sha1")

    def test_algorithm_is_configurable(self):
        assert derive_token("1001", "sha256") == hashlib.sha256(b"1001").hexdigest()


class TestVerifyToken:

    def test_accepts_derived_token(self):
        assert verify_token("1001", derive_token("1001", "sha1"), "sha1") is True

    @pytest.mark.parametrize("presented", [
        "",
        None,
        "not-a-token",
        hashlib.sha1(b"1002").hexdigest(),
        hashlib.sha1(b"1001").hexdigest().upper(),
    ])
    def test_rejects_anything_else(self, presented):
        assert verify_token("1001", presented, "sha1") is False


def test_build_pickup_link_carries_order_and_token():
    url = build_pickup_link(1001, base_url="https://pickup.example.com/")

    parsed = urlparse(url)
    query = parse_qs(parsed.query)
    assert parsed.netloc == "pickup.example.com"
    assert parsed.path == "/pickup/confirm"
    assert query["order_id"] == ["1001"]
    assert query["token"] == [derive_token("1001")]


class TestCanonicalOrderId:

    @pytest.mark.parametrize("raw,expected", [
        ("1001", "1001"),
        (1001, "1001"),
        (" 1001 ", "1001"),
        ("01001", "1001"),
        ("0", "0"),
    ])
    def test_plain_decimal_ids(self, raw, expected):
        assert canonical_order_id(raw) == expected

    @pytest.mark.parametrize("raw", [
        None,
        "",
        True,
        "1001.json?x=",
        "1001/fulfillments",
        "-1001",
        "1e3",
        "١٠٠١",
    ])
    def test_everything_else_is_rejected(self, raw):
        assert canonical_order_id(raw) is None
