"""
Shopify Admin GraphQL client.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from arsenal.config import Settings
from arsenal.errors import ConfigurationError, TransportError, UpstreamAPIError

# Set up logging
logger = logging.getLogger(__name__)

METAFIELD_NAMESPACE = "rc_arsenal"
CUSTOMER_GID_PREFIX = "gid://shopify/Customer/"


def normalize_store_host(store_url: str) -> str:
    """Strip any scheme and trailing slashes so only the host remains."""
    host = store_url.strip()
    for scheme in ("https://", "http://"):
        if host.lower().startswith(scheme):
            host = host[len(scheme):]
    return host.rstrip("/")


class ShopifyClient:
    """Sends one GraphQL document per call to the Admin API."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    @property
    def endpoint(self) -> str:
        if not self.settings.shopify_store_url:
            raise ConfigurationError("SHOPIFY_STORE_URL environment variable is not set.")
        host = normalize_store_host(self.settings.shopify_store_url)
        return f"https://{host}/admin/api/{self.settings.shopify_api_version}/graphql.json"

    async def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Execute a query or mutation and return the envelope's `data` payload.

        Raises:
            ConfigurationError: store URL or access token missing (no request is sent)
            UpstreamAPIError: the envelope carried an `errors` entry
            TransportError: network failure, timeout or unreadable response
        """
        endpoint = self.endpoint
        if not self.settings.shopify_access_token:
            raise ConfigurationError("SHOPIFY_ACCESS_TOKEN environment variable is not set.")

        headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": self.settings.shopify_access_token,
        }
        payload = {"query": query, "variables": variables or {}}

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.upstream_timeout, transport=self.transport
            ) as client:
                response = await client.post(endpoint, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Shopify request failed: {e.__class__.__name__}: {e}")
            raise TransportError(f"Shopify request failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"Shopify returned a non-JSON body (HTTP {response.status_code})")
            raise TransportError(f"Shopify returned a non-JSON response (HTTP {response.status_code}).") from e

        if not isinstance(body, dict):
            raise TransportError(f"Unexpected Shopify response shape (HTTP {response.status_code}).")

        errors = body.get("errors")
        if errors:
            raise _envelope_error(errors)

        if response.status_code >= 400:
            logger.error(f"Shopify responded with HTTP {response.status_code}")
            raise TransportError(f"Shopify responded with HTTP {response.status_code}.")

        data = body.get("data")
        if data is None:
            raise UpstreamAPIError("Shopify response contained no data.")
        return data


def _envelope_error(errors: Any) -> UpstreamAPIError:
    # Auth failures come back as a bare string rather than a list of objects
    if isinstance(errors, str):
        logger.error(f"Shopify API error: {errors}")
        return UpstreamAPIError(f"Shopify API request failed. First error: {errors}")

    if isinstance(errors, list) and errors:
        first = errors[0] if isinstance(errors[0], dict) else {"message": str(errors[0])}
    elif isinstance(errors, dict):
        first = errors
    else:
        first = {"message": str(errors)}

    message = first.get("message") or "Unknown error"
    extensions = first.get("extensions") or {}
    code = extensions.get("code") if isinstance(extensions, dict) else None
    logger.error(f"Shopify API error ({code or 'no code'}): {message}")
    return UpstreamAPIError(f"Shopify API request failed. First error: {message}", code=code)
