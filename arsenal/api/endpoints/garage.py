# /arsenal/api/endpoints/garage.py
"""
Garage (player profile) endpoint.
"""
import logging
from fastapi import APIRouter, Depends, Query
from arsenal.api.deps import api_error, get_shopify_client
from arsenal.clients.shopify import METAFIELD_NAMESPACE, ShopifyClient
from arsenal.errors import ArsenalError, NotFoundError, ValidationError
from arsenal.models.common_models import ErrorResponse
from arsenal.models.garage_models import GarageProfile
from arsenal.utils.attributes import customer_fallback_name, normalize_profile
from arsenal.utils.helpers import normalize_customer_id
from typing import Any, Dict, Optional

# Set up logger for this module
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()

GARAGE_QUERY = f"""
query getCustomerGarageData($id: ID!) {{
  customer(id: $id) {{
    id
    displayName
    firstName
    lastName
    metafields(namespace: "{METAFIELD_NAMESPACE}", first: 50) {{
      edges {{ node {{ key value type }} }}
    }}
  }}
}}
"""


@router.get(
    "/garage-data",
    summary="Get a pilot's garage profile",
    description="Reads the customer's rc_arsenal metafields and returns them with every default filled in.",
    response_model=GarageProfile,
    responses={
        200: {"description": "Normalized profile"},
        400: {"description": "Missing or malformed customer ID", "model": ErrorResponse},
        404: {"description": "Customer not found", "model": ErrorResponse},
        500: {"description": "Upstream failure", "model": ErrorResponse},
    },
)
async def get_garage_data(
    customerId: Optional[str] = Query(None, description="Bare customer id or customer gid"),
    shopify: ShopifyClient = Depends(get_shopify_client),
) -> Dict[str, Any]:
    if not customerId or not customerId.strip():
        raise api_error(400, "Customer ID is required.")

    try:
        customer_gid = normalize_customer_id(customerId)
    except ValidationError as e:
        raise api_error(400, e.message, e.details)

    logger.info(f"GET /apps/garage-data - {customer_gid}")

    try:
        data = await shopify.execute(GARAGE_QUERY, {"id": customer_gid})
    except ArsenalError as e:
        logger.error(f"Error fetching garage data for {customer_gid}: {e.message}")
        raise api_error(500, "Failed to fetch garage data.", e.message)

    customer = data.get("customer")
    if not customer:
        logger.warning(f"Customer {customer_gid} not found")
        raise NotFoundError("Customer not found.")

    records = [
        edge["node"]
        for edge in (customer.get("metafields") or {}).get("edges") or []
        if edge.get("node")
    ]
    return normalize_profile(
        records,
        customer.get("id") or customer_gid,
        customer_fallback_name(customer),
    )
