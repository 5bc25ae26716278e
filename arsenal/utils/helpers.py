"""
Utility functions for the API.
"""
import json
from typing import Any

from arsenal.clients.shopify import CUSTOMER_GID_PREFIX
from arsenal.errors import ValidationError


def normalize_customer_id(customer_id: Any) -> str:
    """
    Turn a bare numeric customer id or a customer gid into the gid form.

    Args:
        customer_id: "12345", 12345 or "gid://shopify/Customer/12345"

    Returns:
        "gid://shopify/Customer/12345"

    Raises:
        ValidationError: the value is neither form
    """
    if isinstance(customer_id, bool) or customer_id is None:
        raise ValidationError("Invalid customer ID.")

    value = str(customer_id).strip()
    if value.startswith(CUSTOMER_GID_PREFIX):
        value = value[len(CUSTOMER_GID_PREFIX):]

    if not (value.isascii() and value.isdigit()):
        raise ValidationError("Invalid customer ID.", details=f"Unrecognised customer ID format: {customer_id!r}")

    return f"{CUSTOMER_GID_PREFIX}{value}"


def stringify_value(value: Any) -> str:
    """
    Render a metafield value the way Shopify expects it on the wire.

    Booleans become "true"/"false", lists and dicts compact JSON, everything else str().
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, dict)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)
