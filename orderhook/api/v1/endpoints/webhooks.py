"""Payment provider webhook endpoint."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from orderhook.api.deps import get_webhook_service
from orderhook.core.config import settings
from orderhook.core.logging import bind_request_context
from orderhook.schemas.webhook import WebhookAck
from orderhook.services.webhook_service import WebhookService

router = APIRouter()


@router.post("/payments", response_model=WebhookAck)
async def payment_webhook(
    request: Request,
    webhook_service: WebhookService = Depends(get_webhook_service),
) -> JSONResponse:
    """Handle payment provider callbacks.

    The body is read raw and handed over untouched: the signature in the
    ``sign`` header covers the exact bytes sent. Duplicate deliveries are
    acknowledged with 200 so the provider stops retrying.
    """
    bind_request_context(
        endpoint="payment_webhook",
        client=request.client.host if request.client else None,
    )
    body = await request.body()
    signature = request.headers.get(settings.payment_signature_header)

    result = await webhook_service.handle_webhook(body, signature)

    return JSONResponse(
        status_code=result.status_code,
        content=result.body.model_dump(),
    )
