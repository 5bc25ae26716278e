# /arsenal/api/endpoints/killboard.py
"""
Killboard (leaderboard) endpoint.
"""
import logging
from fastapi import APIRouter, Depends
from arsenal.api.deps import api_error, get_shopify_client
from arsenal.clients.shopify import METAFIELD_NAMESPACE, ShopifyClient
from arsenal.errors import ArsenalError
from arsenal.models.common_models import ErrorResponse
from arsenal.models.killboard_models import KillboardEntry
from arsenal.utils.attributes import project_leaderboard_entry, rank_entries
from typing import Any, Dict, List

# Set up logger for this module
logger = logging.getLogger(__name__)

# Create router
router = APIRouter()

KILLBOARD_PAGE_SIZE = 100

KILLBOARD_QUERY = f"""
query getCustomersForKillboard($first: Int!) {{
  customers(
    first: $first,
    sortKey: UPDATED_AT,
    reverse: true,
    query: "metafield:{METAFIELD_NAMESPACE}.xp > 0 OR metafield:{METAFIELD_NAMESPACE}.victories > 0"
  ) {{
    edges {{
      node {{
        id
        displayName
        firstName
        lastName
        username: metafield(namespace: "{METAFIELD_NAMESPACE}", key: "username") {{ value }}
        level: metafield(namespace: "{METAFIELD_NAMESPACE}", key: "level") {{ value }}
        xp: metafield(namespace: "{METAFIELD_NAMESPACE}", key: "xp") {{ value }}
        victories: metafield(namespace: "{METAFIELD_NAMESPACE}", key: "victories") {{ value }}
        tier: metafield(namespace: "{METAFIELD_NAMESPACE}", key: "tier") {{ value }}
        country: metafield(namespace: "{METAFIELD_NAMESPACE}", key: "country") {{ value }}
        avatar: metafield(namespace: "{METAFIELD_NAMESPACE}", key: "avatar_url") {{ value }}
      }}
    }}
  }}
}}
"""


@router.get(
    "/killboard",
    summary="Get the killboard",
    description="Up to 100 recently updated pilots, ranked by victories, then xp, then name.",
    response_model=List[KillboardEntry],
    responses={
        200: {"description": "Ranked killboard entries"},
        500: {"description": "Upstream failure", "model": ErrorResponse},
    },
)
async def get_killboard(shopify: ShopifyClient = Depends(get_shopify_client)) -> List[Dict[str, Any]]:
    logger.info("GET /apps/killboard")

    try:
        data = await shopify.execute(KILLBOARD_QUERY, {"first": KILLBOARD_PAGE_SIZE})
    except ArsenalError as e:
        logger.error(f"Error fetching killboard: {e.message}")
        raise api_error(500, "Failed to fetch killboard data.", e.message)

    edges = (data.get("customers") or {}).get("edges") or []
    entries = [
        project_leaderboard_entry(edge["node"])
        for edge in edges
        if edge.get("node") and edge["node"].get("id")
    ]

    logger.info(f"Returning {len(entries)} killboard entries")
    return rank_entries(entries)
