from __future__ import annotations

import base64
import hashlib
import hmac

from fastapi import Depends, Header, HTTPException, Request
from loguru import logger

from ga4_bridge.api.dependencies import get_settings
from ga4_bridge.config import Settings

SIGNATURE_HEADER = "x-shopify-hmac-sha256"


def compute_shopify_hmac(raw_body: bytes, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_shopify_hmac(raw_body: bytes, signature: str | None, secret: str | None) -> bool:
    """Check ``signature`` against the raw, unparsed request body.

    An unset or empty ``secret`` turns verification off and every body is
    accepted. With a secret configured, a missing header always fails.
    """
    if not secret:
        return True
    if not signature:
        return False
    expected = compute_shopify_hmac(raw_body, secret)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))


async def require_shopify_signature(
    request: Request,
    x_shopify_hmac_sha256: str | None = Header(default=None, alias=SIGNATURE_HEADER),
    settings: Settings = Depends(get_settings),
) -> bytes:
    # Body is fully buffered before the check; parsing happens afterwards.
    raw_body = await request.body()
    if not verify_shopify_hmac(raw_body, x_shopify_hmac_sha256, settings.webhook_secret()):
        logger.warning(
            "rejected webhook from {}: invalid or missing {}",
            request.client.host if request.client else "unknown",
            SIGNATURE_HEADER,
        )
        raise HTTPException(status_code=401, detail="Invalid HMAC signature")
    return raw_body
