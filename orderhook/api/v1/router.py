"""API v1 router - combines all endpoint routers."""

from fastapi import APIRouter

from orderhook.api.v1.endpoints import health, notifications, orders, webhooks

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["Health"])
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])
api_router.include_router(orders.router, prefix="/orders", tags=["Orders"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
