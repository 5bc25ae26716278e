"""
Error types raised by the upstream adapters and request validation.
Each carries the HTTP status the API answers with when it escapes a handler.
"""
from typing import Any, Optional


class ArsenalError(Exception):
    """Base class for every failure the API maps to an HTTP response."""
    status_code = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(ArsenalError):
    """A required credential or endpoint is not configured."""


class UpstreamAPIError(ArsenalError):
    """The Shopify GraphQL envelope reported errors."""

    def __init__(self, message: str, code: Optional[str] = None, details: Any = None):
        super().__init__(message, details)
        self.code = code


class TransportError(ArsenalError):
    """The outbound call failed before a usable response came back."""


class NotFoundError(ArsenalError):
    status_code = 404


class ValidationError(ArsenalError):
    """Malformed caller input."""
    status_code = 400


class UploadError(ArsenalError):
    """The image host rejected the upload or could not be reached."""


class ForbiddenError(ArsenalError):
    status_code = 403
