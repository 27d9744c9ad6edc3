"""Routes API / API routes."""

from fastapi import APIRouter

from bulkdispo.api import audit, bookings, orders, tours

api_router = APIRouter(prefix="/api")

api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(tours.router, prefix="/tours", tags=["tours"])
api_router.include_router(bookings.router, prefix="/bookings", tags=["bookings"])
api_router.include_router(audit.router, prefix="/audit", tags=["audit"])
