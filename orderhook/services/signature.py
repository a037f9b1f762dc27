"""Payment provider webhook signature verification.

The provider signs the request body it sends and delivers the digest in the
``sign`` header. The signed byte sequence is::

    md5( base64(raw_body) + secret ).hexdigest()

where ``raw_body`` is the exact UTF-8 JSON the provider sent, in its own key
order. The body is never parsed and re-serialized before hashing, and no
field is removed from it.
"""

import base64
import hashlib
import hmac
from dataclasses import dataclass
from typing import Optional

from orderhook.core.config import settings
from orderhook.core.logging import get_logger

logger = get_logger(__name__)


def signing_bytes(raw_body: bytes) -> bytes:
    """Canonical byte sequence the provider hashes (before the secret is appended)."""
    return base64.b64encode(raw_body)


def compute_signature(raw_body: bytes, secret: str) -> str:
    """Compute the hex digest the provider would send for ``raw_body``."""
    return hashlib.md5(signing_bytes(raw_body) + secret.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class SignatureCheck:
    """Verification outcome. ``expected`` is kept for diagnostics only."""

    valid: bool
    expected: str


class SignatureVerifier:
    """Validates that a webhook body was signed with the shared secret."""

    def __init__(self, secret: Optional[str] = None):
        self.secret = secret if secret is not None else settings.active_payment_webhook_secret

    def verify(self, raw_body: bytes, signature: Optional[str]) -> SignatureCheck:
        if not self.secret:
            logger.error("webhook_secret_not_configured")
            return SignatureCheck(valid=False, expected="")

        expected = compute_signature(raw_body, self.secret)
        if not signature:
            return SignatureCheck(valid=False, expected=expected)

        valid = hmac.compare_digest(expected, signature.strip().lower())
        return SignatureCheck(valid=valid, expected=expected)
