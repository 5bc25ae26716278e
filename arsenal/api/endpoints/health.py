"""
Health check endpoint.
"""
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

# Create router
router = APIRouter()


@router.get("/health", response_class=PlainTextResponse, summary="Health check")
async def health() -> str:
    return "OK"
