# /arsenal/api/endpoints/customers.py
"""
Customer update endpoints: public update and the admin-gated variant.
"""
import logging
from fastapi import APIRouter, Depends
from arsenal.api.deps import api_error, get_shopify_client, require_admin_secret
from arsenal.clients.shopify import METAFIELD_NAMESPACE, ShopifyClient
from arsenal.errors import ArsenalError, ValidationError
from arsenal.models.common_models import ErrorResponse
from arsenal.models.customer_models import (
    DEFAULT_METAFIELD_TYPE, CustomerUpdateRequest, CustomerUpdateResponse
)
from arsenal.utils.helpers import normalize_customer_id, stringify_value
from typing import Any, Dict

# Set up logger for this module
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()

CUSTOMER_UPDATE_MUTATION = """
mutation customerUpdate($input: CustomerInput!) {
  customerUpdate(input: $input) {
    customer { id }
    userErrors { field message }
  }
}
"""

UPDATE_RESPONSES = {
    200: {"description": "Customer updated", "model": CustomerUpdateResponse},
    400: {"description": "Invalid request or Shopify user errors", "model": ErrorResponse},
    500: {"description": "Upstream failure", "model": ErrorResponse},
}


def build_customer_input(request: CustomerUpdateRequest) -> Dict[str, Any]:
    """
    Build the CustomerInput for the mutation. Every value is sent as a string.

    Raises:
        ValidationError: the customer ID is not usable
    """
    return {
        "id": normalize_customer_id(request.customerId),
        "metafields": [
            {
                "namespace": METAFIELD_NAMESPACE,
                "key": metafield.key,
                "value": stringify_value(metafield.value),
                "type": metafield.type or DEFAULT_METAFIELD_TYPE,
            }
            for metafield in request.metafields
        ],
    }


async def update_customer_metafields(request: CustomerUpdateRequest, shopify: ShopifyClient) -> Dict[str, Any]:
    """Shared by the public and admin update routes."""
    try:
        customer_input = build_customer_input(request)
    except ValidationError as e:
        raise api_error(400, e.message, e.details)

    keys = ", ".join(metafield["key"] for metafield in customer_input["metafields"])
    logger.info(f"Updating {customer_input['id']}: {keys}")

    try:
        data = await shopify.execute(CUSTOMER_UPDATE_MUTATION, {"input": customer_input})
    except ArsenalError as e:
        logger.error(f"Error updating customer {customer_input['id']}: {e.message}")
        raise api_error(500, "Failed to update customer data.", e.message)

    result = data.get("customerUpdate") or {}
    user_errors = result.get("userErrors") or []
    if user_errors:
        logger.warning(f"Shopify rejected update for {customer_input['id']}: {user_errors}")
        raise api_error(400, "Failed to update customer.", user_errors)

    customer = result.get("customer")
    if not customer or not customer.get("id"):
        raise api_error(500, "Failed to update customer data.", "Shopify did not return the updated customer.")

    return {"success": True, "id": customer["id"]}


@router.post(
    "/update-customer",
    summary="Update a pilot's metafields",
    response_model=CustomerUpdateResponse,
    responses=UPDATE_RESPONSES,
)
async def update_customer(
    request: CustomerUpdateRequest,
    shopify: ShopifyClient = Depends(get_shopify_client),
) -> Dict[str, Any]:
    logger.info("POST /apps/update-customer")
    return await update_customer_metafields(request, shopify)


@router.post(
    "/admin-update",
    summary="Update a pilot's metafields (admin)",
    description="Same as update-customer, but requires the X-Admin-Secret header.",
    response_model=CustomerUpdateResponse,
    responses={**UPDATE_RESPONSES, 403: {"description": "Invalid or missing admin secret", "model": ErrorResponse}},
    dependencies=[Depends(require_admin_secret)],
)
async def admin_update(
    request: CustomerUpdateRequest,
    shopify: ShopifyClient = Depends(get_shopify_client),
) -> Dict[str, Any]:
    logger.info("POST /apps/admin-update")
    return await update_customer_metafields(request, shopify)
