"""
PickupDesk - Main FastAPI Application
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.api.v1 import router as api_v1_router
from app.api.v1.endpoints.pickup import page_router as pickup_page_router
from app.core.limiter import apply_rate_limiting
from app.core.settings import settings
from app.exceptions import PickupDeskException
from app.logging_config import setup_logging, get_logger

# Setup structured logging
setup_logging()
logger = get_logger(__name__)

# Sentry picks up ERROR logs (UPSTREAM_ERROR / INTERNAL pickups) as events
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        traces_sample_rate=0.1,
        environment=settings.ENVIRONMENT,
        release=f"pickupdesk@{settings.VERSION}",
    )
else:
    logger.info("SENTRY_DSN not set - error tracking disabled")


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


# ===================
# Security Headers Middleware
# ===================

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Pickup links carry the token in the query string
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Cache-Control"] = "no-store"
        # HSTS in production
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


def check_shopify_settings():
    """Warn at startup about missing Shopify or location configuration."""
    if not settings.SHOP_NAME or not settings.SHOPIFY_ADMIN_TOKEN:
        logger.warning("SHOP_NAME or SHOPIFY_ADMIN_TOKEN not set - every pickup will fail upstream")
    if settings.default_location_id is None:
        logger.info("No pickup location configured - falling back to Shopify's first location")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(
        "Starting PickupDesk API",
        extra={
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "shop": settings.SHOP_NAME,
        }
    )
    check_shopify_settings()
    yield
    logger.info("Shutting down PickupDesk API")


# Create FastAPI app
app = FastAPI(
    title="PickupDesk API",
    description="Customer pickup confirmation for Shopify orders",
    version=settings.VERSION,
    lifespan=lifespan,
)

app.state.limiter, RATE_LIMITS_ENABLED = apply_rate_limiting(app)

# Security headers middleware (outermost)
app.add_middleware(SecurityHeadersMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Accept", "Origin", "X-API-Key", "X-Requested-With"],
)


# ===================
# Exception Handlers
# ===================

@app.exception_handler(PickupDeskException)
async def pickupdesk_exception_handler(request: Request, exc: PickupDeskException):
    logger.warning(
        f"PickupDesk Exception: {exc.error_code} - {exc.message}",
        extra={"error_code": exc.error_code, "details": exc.details, "path": request.url.path}
    )
    error_dict = exc.to_dict()
    error_dict["timestamp"] = _timestamp()
    return JSONResponse(status_code=exc.status_code, content=error_dict)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        errors.append({"field": field, "message": error["msg"], "type": error["type"]})
    logger.warning("Validation error on %s", request.url.path, extra={"errors": errors})
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": {"errors": errors},
            "timestamp": _timestamp(),
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error on {request.url.path}: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred. Please try again later.",
            "timestamp": _timestamp(),
        },
    )


# Include routes
app.include_router(pickup_page_router)
app.include_router(api_v1_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    return {"message": "🚀 PickupDesk is live", "version": settings.VERSION, "status": "online"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=3000, reload=settings.DEBUG)
