# /arsenal/config.py
"""
Configuration settings for the application.
Loads environment variables once and hands them around as an immutable Settings object.
"""
import os
import logging
from dataclasses import dataclass
from typing import List, Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2024-04"
DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024
DEFAULT_PORT = 10000


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once at startup."""
    shopify_store_url: Optional[str] = None
    shopify_access_token: Optional[str] = None
    shopify_api_version: str = DEFAULT_API_VERSION
    imgbb_api_key: Optional[str] = None
    admin_secret: Optional[str] = None
    upstream_timeout: float = DEFAULT_TIMEOUT
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    def missing(self) -> List[str]:
        """Names of required environment variables that are not set."""
        required = {
            "SHOPIFY_STORE_URL": self.shopify_store_url,
            "SHOPIFY_ACCESS_TOKEN": self.shopify_access_token,
            "IMGBB_API_KEY": self.imgbb_api_key,
            "ADMIN_SECRET": self.admin_secret,
        }
        return [name for name, value in required.items() if not value]


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not a number, using {default}")
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not an integer, using {default}")
        return default


def load_settings() -> Settings:
    """Read the environment (and a local .env file, if any) into Settings."""
    load_dotenv(override=True)

    return Settings(
        shopify_store_url=os.getenv("SHOPIFY_STORE_URL") or None,
        shopify_access_token=os.getenv("SHOPIFY_ACCESS_TOKEN") or None,
        shopify_api_version=os.getenv("SHOPIFY_API_VERSION") or DEFAULT_API_VERSION,
        imgbb_api_key=os.getenv("IMGBB_API_KEY") or None,
        admin_secret=os.getenv("ADMIN_SECRET") or None,
        upstream_timeout=_env_float("UPSTREAM_TIMEOUT", DEFAULT_TIMEOUT),
        max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES),
        port=_env_int("PORT", DEFAULT_PORT),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
