"""
API v1 Router - PickupDesk
"""
from fastapi import APIRouter
from app.api.v1.endpoints import pickup

router = APIRouter()

# Pickup confirmation (JSON) and operator link issuing
router.include_router(pickup.router)
