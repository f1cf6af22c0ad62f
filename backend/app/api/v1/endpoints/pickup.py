"""
Pickup Endpoints

Shopper-facing pages reached from the pickup link, a JSON variant of the
confirm action, and an operator route that issues links.

Routes on ``page_router`` keep the URLs of links already sent to shoppers
(/pickup/confirm...), so they are mounted without the /api/v1 prefix.
"""
import html
import json
from typing import Optional

from fastapi import APIRouter, Depends, Path, Request
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.concurrency import run_in_threadpool

from app.api.v1.deps import get_pickup_service, require_api_key
from app.core.limiter import limiter
from app.core.messages import page_text
from app.core.settings import settings
from app.logging_config import get_logger
from app.schemas.pickup import (
    PickupConfirmRequest,
    PickupConfirmResponse,
    PickupLinkResponse,
    PickupOutcome,
)
from app.services.pickup_service import PickupResult, PickupService
from app.services.pickup_token import build_pickup_link, derive_token

logger = get_logger(__name__)

page_router = APIRouter(prefix="/pickup", tags=["pickup"])
router = APIRouter(prefix="/pickup", tags=["pickup"])


# ============================================================================
# HTML RENDERING
# ============================================================================

_PAGE_STYLE = "font-family:sans-serif;text-align:center;padding:50px;"


def _message_html(result: PickupResult) -> HTMLResponse:
    return HTMLResponse(
        content=f"<h2>{html.escape(result.message)}</h2>",
        status_code=result.http_status,
    )


def _confirm_page(order_id: str, token: str, result: PickupResult, locale: str) -> HTMLResponse:
    """Confirmation page with a button that posts to the execute route."""
    text = page_text(locale)
    body = json.dumps({"order_id": order_id, "token": token}).replace("<", "\\u003c")
    content = f"""
      <html dir="{text['direction']}">
      <body style="{_PAGE_STYLE}">
        <h2>{html.escape(result.message)}</h2>
        <button id="confirmBtn" style="padding:10px 20px;font-size:16px;">{html.escape(text['confirm_button'])}</button>
        <p id="status" style="margin-top:20px;font-weight:bold;"></p>

        <script>
          const btn = document.getElementById("confirmBtn");
          const status = document.getElementById("status");

          btn.addEventListener("click", async () => {{
            btn.disabled = true;
            status.textContent = {json.dumps(text['pending'])};
            try {{
              const res = await fetch("/pickup/confirm/execute", {{
                method: "POST",
                headers: {{ "Content-Type": "application/json" }},
                body: JSON.stringify({body})
              }});
              status.innerHTML = await res.text();
              if (res.status >= 500) btn.disabled = false;
            }} catch (err) {{
              status.textContent = {json.dumps(text['failed'])};
              btn.disabled = false;
            }}
          }});
        </script>
      </body>
      </html>
    """
    return HTMLResponse(content=content, status_code=result.http_status)


async def _read_confirm_body(request: Request) -> PickupConfirmRequest:
    """Accept JSON or form-encoded bodies; anything unreadable is an empty request."""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("application/json"):
            data = await request.json()
        else:
            data = dict(await request.form())
        if not isinstance(data, dict):
            return PickupConfirmRequest()
        return PickupConfirmRequest(
            order_id=_as_text(data.get("order_id")),
            token=_as_text(data.get("token")),
        )
    except ValueError:
        logger.info("Unreadable pickup confirmation body", extra={"path": request.url.path})
        return PickupConfirmRequest()


def _as_text(value) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value)


# ============================================================================
# SHOPPER PAGES
# ============================================================================

@page_router.get("/confirm", response_class=HTMLResponse)
@limiter.limit(settings.RATE_LIMIT_PICKUP)
async def show_pickup_confirmation(
    request: Request,
    order_id: Optional[str] = None,
    token: Optional[str] = None,
    service: PickupService = Depends(get_pickup_service),
):
    """Confirmation page for a pickup link, or the reason it cannot be used."""
    result = await run_in_threadpool(service.preview, order_id, token)
    if result.outcome != PickupOutcome.READY:
        return _message_html(result)
    return _confirm_page(result.order_id, token, result, service.locale)


@page_router.post("/confirm/execute", response_class=HTMLResponse)
@limiter.limit(settings.RATE_LIMIT_PICKUP)
async def execute_pickup_confirmation(
    request: Request,
    service: PickupService = Depends(get_pickup_service),
):
    """Confirm the pickup and fulfill the order; answers with an HTML fragment."""
    body = await _read_confirm_body(request)
    result = await run_in_threadpool(service.confirm_pickup, body.order_id, body.token)
    return _message_html(result)


# ============================================================================
# JSON API
# ============================================================================

@router.post("/confirm", response_model=PickupConfirmResponse)
@limiter.limit(settings.RATE_LIMIT_PICKUP)
async def confirm_pickup(
    request: Request,
    service: PickupService = Depends(get_pickup_service),
):
    """JSON variant of the execute route."""
    body = await _read_confirm_body(request)
    result = await run_in_threadpool(service.confirm_pickup, body.order_id, body.token)
    return JSONResponse(
        status_code=result.http_status,
        content=PickupConfirmResponse(outcome=result.outcome, message=result.message).model_dump(
            mode="json"
        ),
    )


@router.get(
    "/links/{order_id}",
    response_model=PickupLinkResponse,
    dependencies=[Depends(require_api_key)],
)
def get_pickup_link(order_id: int = Path(..., ge=0)):
    """Issue the shopper link for an order (operator use)."""
    return PickupLinkResponse(
        order_id=str(order_id),
        token=derive_token(order_id),
        url=build_pickup_link(order_id),
    )
