"""
API Dependencies

Service wiring and the operator API-key check.
"""
import secrets
from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Header

from app.core.settings import settings
from app.exceptions import AuthenticationError
from app.services.location_resolver import LocationConfig, LocationResolver
from app.services.pickup_ledger import PickupLedger
from app.services.pickup_service import PickupService
from app.services.shopify_client import ShopifyClient


@lru_cache
def get_pickup_service() -> PickupService:
    """
    Process-wide pickup service.

    Cached so every request shares one PickupLedger; the single-use guarantee
    depends on it.
    """
    client = ShopifyClient()
    resolver = LocationResolver(LocationConfig.from_settings(settings), client)
    return PickupService(client, PickupLedger(), resolver)


async def require_api_key(
    x_api_key: Annotated[Optional[str], Header()] = None,
) -> None:
    """
    Dependency guarding operator routes.

    Raises:
        AuthenticationError 401 if API_KEY is unset or the header does not match
    """
    if not settings.API_KEY or not secrets.compare_digest(x_api_key or "", settings.API_KEY):
        raise AuthenticationError("Valid X-API-Key header required")
