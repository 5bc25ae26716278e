# /arsenal/api/endpoints/uploads.py
"""
Image upload endpoint.
"""
import logging
from fastapi import APIRouter, Depends, File, UploadFile
from arsenal.api.deps import api_error, get_imgbb_client, get_settings
from arsenal.clients.imgbb import ImgbbClient
from arsenal.config import Settings
from arsenal.errors import ConfigurationError, UploadError
from arsenal.models.common_models import ErrorResponse, UploadResponse
from typing import Dict, Optional

# Set up logger for this module
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()


@router.post(
    "/upload-image",
    summary="Upload an image",
    description="Forwards the multipart `image` field to ImgBB and returns the hosted URL.",
    response_model=UploadResponse,
    responses={
        200: {"description": "Hosted image URL"},
        400: {"description": "No image provided", "model": ErrorResponse},
        413: {"description": "Image too large", "model": ErrorResponse},
        500: {"description": "Not configured or upload failure", "model": ErrorResponse},
    },
)
async def upload_image(
    image: Optional[UploadFile] = File(None, description="Image file"),
    settings: Settings = Depends(get_settings),
    imgbb: ImgbbClient = Depends(get_imgbb_client),
) -> Dict[str, str]:
    if image is None:
        raise api_error(400, "No image file provided.")

    payload = await image.read()
    if not payload:
        raise api_error(400, "No image file provided.")
    if len(payload) > settings.max_upload_bytes:
        raise api_error(
            413,
            "Image file is too large.",
            f"Limit is {settings.max_upload_bytes} bytes, got {len(payload)}.",
        )

    logger.info(f"POST /apps/upload-image - {image.filename or 'unnamed'} ({len(payload)} bytes)")

    try:
        url = await imgbb.upload(payload)
    except ConfigurationError as e:
        logger.error(e.message)
        raise api_error(500, e.message)
    except UploadError as e:
        raise api_error(500, e.message, e.details)

    return {"url": url}
