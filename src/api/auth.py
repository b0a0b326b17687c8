"""
Shared-secret check for API routes.

Requests must carry an ``x-secret`` header equal to SECRET_PASSWORD.
When no secret is configured every request is allowed (development mode).
"""

import hmac
from typing import Optional

from fastapi import Header, HTTPException, Request

from ..core import config
from util.logging import logger

UNAUTHORIZED_DETAIL = "Unauthorized: Missing or invalid x-secret header"


def check_secret(provided: Optional[str]) -> bool:
    """
    Validate a secret against SECRET_PASSWORD.

    Returns True if the request may proceed, False otherwise.
    """
    expected = config.get_secret_password()

    if not expected:
        logger.debug("No SECRET_PASSWORD configured, allowing request")
        return True

    if not provided:
        return False

    # Compare secrets in constant time
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def require_secret(request: Request, x_secret: Optional[str] = Header(None)):
    """FastAPI dependency rejecting requests without a valid x-secret header."""
    if request.method == "OPTIONS":
        return

    if not check_secret(x_secret):
        reason = "missing" if not x_secret else "invalid"
        logger.log_auth_failure(reason, request.url.path)
        raise HTTPException(status_code=401, detail=UNAUTHORIZED_DETAIL)
