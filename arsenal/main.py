# /arsenal/main.py
"""
Main application module for the API.
This is the entry point that initializes the FastAPI app and includes all routes.
"""
import logging
import sys
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from arsenal.api.router import router
from arsenal.config import Settings, load_settings
from arsenal.errors import ArsenalError

logger = logging.getLogger(__name__)

INVALID_UPDATE_MESSAGE = "Invalid request: requires customerId and a non-empty metafields array."
INVALID_REQUEST_MESSAGE = "Invalid request."

# 400 message per route when FastAPI rejects the request before the handler runs
VALIDATION_MESSAGES = {
    "/apps/update-customer": INVALID_UPDATE_MESSAGE,
    "/apps/admin-update": INVALID_UPDATE_MESSAGE,
    "/apps/upload-image": "No image file provided.",
}


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        stream=sys.stdout,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        force=True  # Override any previous configuration
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTPException details as the {error, details} body."""
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        content = exc.detail
    else:
        content = {"error": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


def validation_message(path: str) -> str:
    return VALIDATION_MESSAGES.get(path.rstrip("/"), INVALID_REQUEST_MESSAGE)


async def arsenal_error_handler(request: Request, exc: ArsenalError) -> JSONResponse:
    """Errors that escape a handler are answered with their own status code."""
    content = {"error": exc.message}
    if exc.details is not None:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are a 400, not FastAPI's default 422."""
    details = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    logger.info(f"Rejected invalid request to {request.url.path}: {len(details)} error(s)")
    return JSONResponse(status_code=400, content={"error": validation_message(request.url.path), "details": details})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the app. Settings are loaded from the environment unless given."""
    settings = settings or load_settings()

    app = FastAPI(
        title="RC Arsenal API",
        description="Proxy between the RC Arsenal client, Shopify customer metafields and ImgBB"
    )
    app.state.settings = settings

    # Enable CORS for all routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ArsenalError, arsenal_error_handler)

    app.include_router(router)

    missing = settings.missing()
    if missing:
        logger.warning(f"One or more required environment variables are missing: {', '.join(missing)}")

    return app


# Module-level app for `uvicorn arsenal.main:app`
app = create_app()


def run() -> None:
    import uvicorn

    settings = load_settings()
    configure_logging(settings.log_level)
    logger.info(f"RC Arsenal Backend listening on port {settings.port}")
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
