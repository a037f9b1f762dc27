"""Operator alerts (Telegram)."""

from typing import Optional

import httpx
from tenacity import retry, stop_after_attempt, wait_exponential

from orderhook.core.config import settings
from orderhook.core.logging import get_logger

logger = get_logger(__name__)


class AlertService:
    """Best-effort alerts to the operations chat. Never raises."""

    def __init__(self):
        self.bot_token = settings.telegram_bot_token
        self.alerts_chat_id = settings.telegram_alerts_chat_id
        self.base_url = f"https://api.telegram.org/bot{self.bot_token}"

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _post_message(self, chat_id: str, text: str, parse_mode: str) -> None:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.post(
                f"{self.base_url}/sendMessage",
                json={
                    "chat_id": chat_id,
                    "text": text,
                    "parse_mode": parse_mode,
                },
            )
            response.raise_for_status()

    async def _send_message(
        self,
        chat_id: str,
        text: str,
        parse_mode: str = "HTML",
    ) -> bool:
        """Send a message to a Telegram chat."""
        if not self.bot_token or not chat_id:
            logger.warning("telegram_not_configured")
            return False

        try:
            await self._post_message(chat_id, text, parse_mode)
            return True
        except Exception as e:
            logger.error("telegram_send_failed", error=str(e))
            return False

    async def alert_critical(
        self,
        title: str,
        message: str,
        order_id: Optional[str] = None,
        error: Optional[str] = None,
    ) -> bool:
        """Send critical alert to ops team.

        Used for: lost notifications and webhook failures after an event
        was already ledgered.
        """
        text = f"<b>🚨 {title}</b>\n\n{message}"

        if order_id:
            text += f"\n\n<b>Order ID:</b> <code>{order_id}</code>"

        if error:
            text += f"\n\n<b>Error:</b>\n<pre>{error[:500]}</pre>"

        success = await self._send_message(self.alerts_chat_id, text)
        if success:
            logger.info("critical_alert_sent", title=title)
        return success

    async def alert_notification_failure(self, order_id: str, error: str) -> bool:
        """Alert when an order committed but its notifications were not stored."""
        return await self.alert_critical(
            title="Payment Notifications Not Stored",
            message=(
                "The order transition was committed but its notifications failed.\n"
                "⚠️ <b>Run the notification repair for this order</b>"
            ),
            order_id=order_id,
            error=error,
        )

    async def alert_webhook_failure(
        self,
        order_id: str,
        fingerprint: str,
        error: str,
    ) -> bool:
        """Alert when a ledgered event failed; the provider will not redeliver it."""
        return await self.alert_critical(
            title="Payment Webhook Processing Failed",
            message=(
                f"<b>Fingerprint:</b> <code>{fingerprint}</code>\n"
                "The event is recorded as processed and was acknowledged to the provider.\n"
                "⚠️ <b>Manual intervention required</b>"
            ),
            order_id=order_id,
            error=error,
        )
