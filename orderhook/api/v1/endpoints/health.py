"""Health check endpoint with webhook pipeline status."""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from orderhook import __version__
from orderhook.core.config import settings
from orderhook.core.database import get_db
from orderhook.core.logging import get_logger
from orderhook.models.webhook_log import IdempotencyRecord

logger = get_logger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    database: str
    webhook_secret_configured: bool
    alerts_configured: bool
    last_webhook_at: Optional[datetime] = None


@router.get("", response_model=HealthResponse)
async def health_check(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Database reachability plus the time of the last ledgered webhook.

    A missing signing secret degrades the status: every callback would be
    rejected with 401.
    """
    db_status = "healthy"
    last_webhook_at = None
    try:
        last_webhook_at = await db.scalar(select(func.max(IdempotencyRecord.processed_at)))
    except SQLAlchemyError as e:
        logger.warning("health_database_unreachable", error=str(e))
        db_status = "unhealthy"

    secret_configured = bool(settings.active_payment_webhook_secret)
    healthy = db_status == "healthy" and secret_configured

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
        database=db_status,
        webhook_secret_configured=secret_configured,
        alerts_configured=bool(settings.telegram_bot_token and settings.telegram_alerts_chat_id),
        last_webhook_at=last_webhook_at,
    )
