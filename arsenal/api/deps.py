"""
Shared FastAPI dependencies: settings, upstream clients and the admin gate.
"""
import logging
import secrets
from typing import Any, Optional

from fastapi import Depends, Header, HTTPException, Request

from arsenal.clients.imgbb import ImgbbClient
from arsenal.clients.shopify import ShopifyClient
from arsenal.config import Settings
from arsenal.errors import ForbiddenError

# Set up logging
logger = logging.getLogger(__name__)

FORBIDDEN_MESSAGE = "Forbidden: invalid admin secret."


def api_error(status_code: int, error: str, details: Any = None) -> HTTPException:
    """HTTPException whose body is rendered as {error, details}."""
    detail = {"error": error}
    if details is not None:
        detail["details"] = details
    return HTTPException(status_code=status_code, detail=detail)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_shopify_client(settings: Settings = Depends(get_settings)) -> ShopifyClient:
    return ShopifyClient(settings)


def get_imgbb_client(settings: Settings = Depends(get_settings)) -> ImgbbClient:
    return ImgbbClient(settings)


def check_admin_secret(provided: Optional[str], configured: Optional[str]) -> None:
    """
    Allow only when a secret is configured and the caller's value matches it exactly.

    Raises:
        ForbiddenError: no secret configured, header missing, or mismatch
    """
    if not configured:
        logger.warning("ADMIN_SECRET is not configured - rejecting admin request")
        raise ForbiddenError(FORBIDDEN_MESSAGE)
    if provided is None or not secrets.compare_digest(provided.encode("utf-8"), configured.encode("utf-8")):
        logger.warning("Admin request rejected: missing or invalid X-Admin-Secret header")
        raise ForbiddenError(FORBIDDEN_MESSAGE)


async def require_admin_secret(
    x_admin_secret: Optional[str] = Header(None, description="Shared admin secret"),
    settings: Settings = Depends(get_settings),
) -> None:
    try:
        check_admin_secret(x_admin_secret, settings.admin_secret)
    except ForbiddenError as e:
        raise api_error(403, e.message)
