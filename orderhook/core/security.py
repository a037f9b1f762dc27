"""API key guard for operator endpoints.

The payment webhook is not behind this guard; it is authenticated by its
payload signature instead.
"""

import hmac
from typing import Optional

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

from orderhook.core.config import settings
from orderhook.core.logging import get_logger

logger = get_logger(__name__)

api_key_header = APIKeyHeader(name=settings.api_key_header, auto_error=False)


def is_valid_api_key(api_key: str) -> bool:
    return any(hmac.compare_digest(api_key, key) for key in settings.valid_api_keys)


def verify_api_key(api_key: Optional[str] = Security(api_key_header)) -> str:
    """Verify the operator API key header."""
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key",
        )
    if not is_valid_api_key(api_key):
        logger.warning("operator_api_key_rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )
    return api_key
