"""Notification endpoints (storage and repair)."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from orderhook.api.deps import get_unit_of_work
from orderhook.core.database import get_db
from orderhook.core.exceptions import OrderLookupFailure
from orderhook.core.security import verify_api_key
from orderhook.repositories.notifications import SqlNotificationRepository
from orderhook.repositories.unit_of_work import SqlUnitOfWork
from orderhook.schemas.notification import (
    MarkReadResponse,
    NotificationResponse,
    RepairResult,
    RepairSummary,
)
from orderhook.services.notification_service import NotificationRepairService

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.get("/users/{user_id}", response_model=list[NotificationResponse])
async def list_user_notifications(
    user_id: str,
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
) -> list[NotificationResponse]:
    """Individual notifications for one customer, newest first."""
    notifications = await SqlNotificationRepository(db).list_for_user(user_id, limit=limit)
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.get("/admins/{admin_id}", response_model=list[NotificationResponse])
async def list_admin_notifications(
    admin_id: str,
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
) -> list[NotificationResponse]:
    """Collective notifications whose audience includes ``admin_id``."""
    notifications = await SqlNotificationRepository(db).list_for_admin(admin_id, limit=limit)
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.post("/{notification_id}/read", response_model=MarkReadResponse)
async def mark_notification_read(
    notification_id: str,
    db: AsyncSession = Depends(get_db),
) -> MarkReadResponse:
    updated = await SqlNotificationRepository(db).mark_read(notification_id)
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found",
        )
    return MarkReadResponse(updated=1)


@router.post("/admins/{admin_id}/read-all", response_model=MarkReadResponse)
async def mark_all_admin_notifications_read(
    admin_id: str,
    db: AsyncSession = Depends(get_db),
) -> MarkReadResponse:
    updated = await SqlNotificationRepository(db).mark_all_read_for_admin(admin_id)
    return MarkReadResponse(updated=updated)


@router.post("/repair/{order_id}", response_model=RepairResult)
async def repair_order_notifications(
    order_id: str,
    uow: SqlUnitOfWork = Depends(get_unit_of_work),
) -> RepairResult:
    """Recreate missing payment notifications for one order. Idempotent."""
    async with uow:
        try:
            return await NotificationRepairService(uow).repair_order(order_id)
        except OrderLookupFailure as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


@router.post("/repair", response_model=RepairSummary)
async def repair_recent_notifications(
    hours: Optional[int] = Query(None, ge=1, le=24 * 30),
    uow: SqlUnitOfWork = Depends(get_unit_of_work),
) -> RepairSummary:
    """Repair sweep over orders paid within the last ``hours``."""
    async with uow:
        return await NotificationRepairService(uow).repair_recent(hours)
