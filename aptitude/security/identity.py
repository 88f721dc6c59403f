import hmac
import logging
from typing import Optional

from fastapi import Header, HTTPException, status

from aptitude.core.config import get_settings

logger = logging.getLogger(__name__)


def current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """
    Authenticated user id forwarded by the upstream auth gateway.

    This service does not authenticate users itself; it trusts the gateway
    that sits in front of it to set X-User-Id.
    """

    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing user identity")
    return x_user_id.strip()


def admin_guard(x_admin_key: Optional[str] = Header(default=None)) -> None:
    """Allow admin routes when X-Admin-Key matches the configured key (constant-time compare)."""

    settings = get_settings()
    if not settings.admin_key:
        return
    if x_admin_key and hmac.compare_digest(x_admin_key, settings.admin_key):
        return
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or missing admin key")


def warn_if_admin_open() -> None:
    if not get_settings().admin_key:
        logger.warning("APTITUDE_ADMIN_KEY is not set; admin routes are open.")
