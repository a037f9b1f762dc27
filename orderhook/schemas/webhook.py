"""Webhook schemas."""

import json
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from orderhook.core.logging import get_logger

logger = get_logger(__name__)

MAX_AMOUNT = Decimal(10) ** 10


class AdditionalData(BaseModel):
    """Side channel the storefront attaches to the provider invoice."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    user_id: Optional[str] = None
    game: Optional[str] = None
    service: Optional[str] = None
    customer_email: Optional[str] = None


class WebhookEvent(BaseModel):
    """Inbound payment provider callback.

    Only the fields the pipeline reads are declared; everything else the
    provider sends is ignored after signature verification.
    """

    model_config = ConfigDict(extra="ignore")

    type: str = "payment"
    uuid: Optional[str] = None
    order_id: str = Field(..., min_length=1)
    status: str = Field(..., min_length=1)
    amount: Optional[str] = None
    payment_amount: Optional[str] = None
    currency: Optional[str] = None
    is_final: bool = False
    additional_data: AdditionalData = Field(default_factory=AdditionalData)

    @field_validator("amount", "payment_amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> Optional[str]:
        if v is None or v == "":
            return None
        if isinstance(v, bool):
            raise ValueError("amount must be a decimal string")
        try:
            amount = Decimal(str(v))
        except InvalidOperation as e:
            raise ValueError(f"amount is not a decimal: {v!r}") from e
        if not amount.is_finite():
            raise ValueError(f"amount must be finite: {v!r}")
        # Orders store prices as Numeric(12, 2).
        if abs(amount) >= MAX_AMOUNT:
            raise ValueError(f"amount out of range: {v!r}")
        return str(v)

    @field_validator("additional_data", mode="before")
    @classmethod
    def parse_additional_data(cls, v: Any) -> Any:
        if v is None or v == "":
            return {}
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
            except json.JSONDecodeError:
                logger.warning("additional_data_unparseable", additional_data=v[:200])
                return {}
            return parsed if isinstance(parsed, dict) else {}
        return v

    @model_validator(mode="after")
    def require_amount(self) -> "WebhookEvent":
        if self.amount is None and self.payment_amount is None:
            raise ValueError("amount or payment_amount is required")
        return self

    @property
    def effective_amount(self) -> str:
        """Provider amount as sent, preferring ``amount`` over ``payment_amount``."""
        return self.amount if self.amount is not None else self.payment_amount

    @property
    def decimal_amount(self) -> Decimal:
        return Decimal(self.effective_amount)


class WebhookAck(BaseModel):
    """Acknowledgment body returned to the provider."""

    received: bool = True
    status: str = "processed"
    message: str = "Webhook processed"
    order_id: Optional[str] = None


class AckResult(BaseModel):
    """HTTP status plus body for one handled webhook call."""

    status_code: int = 200
    body: WebhookAck
