"""
ImgBB upload client.
"""
import base64
import logging
from typing import Optional

import httpx

from arsenal.config import Settings
from arsenal.errors import ConfigurationError, UploadError

# Set up logging
logger = logging.getLogger(__name__)

IMGBB_UPLOAD_URL = "https://api.imgbb.com/1/upload"


class ImgbbClient:
    """Forwards a single in-memory image to ImgBB and returns its public URL."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    async def upload(self, payload: bytes) -> str:
        if not self.settings.imgbb_api_key:
            raise ConfigurationError("Image hosting (IMGBB_API_KEY) is not configured on the server.")

        encoded = base64.b64encode(payload).decode("ascii")

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.upstream_timeout, transport=self.transport
            ) as client:
                # (None, value) sends a plain multipart field, not a file part
                response = await client.post(
                    IMGBB_UPLOAD_URL,
                    params={"key": self.settings.imgbb_api_key},
                    files={"image": (None, encoded)},
                )
        except httpx.HTTPError as e:
            logger.error(f"ImgBB request failed: {e.__class__.__name__}: {e}")
            raise UploadError("An exception occurred during image upload.", details=str(e)) from e

        try:
            result = response.json()
        except ValueError as e:
            logger.error(f"ImgBB returned a non-JSON body (HTTP {response.status_code})")
            raise UploadError(
                "An exception occurred during image upload.",
                details=f"ImgBB returned a non-JSON response (HTTP {response.status_code}).",
            ) from e

        if not isinstance(result, dict) or not result.get("success"):
            error = result.get("error") if isinstance(result, dict) else None
            message = error.get("message") if isinstance(error, dict) else None
            logger.error(f"ImgBB Error: {message or 'unknown error'}")
            raise UploadError("Failed to upload image.", details=message)

        url = (result.get("data") or {}).get("url")
        if not url:
            raise UploadError("Failed to upload image.", details="ImgBB response did not include a URL.")

        logger.info(f"Uploaded {len(payload)} bytes to ImgBB")
        return url
