"""
Pydantic models for the garage-data endpoint.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List


class GarageProfile(BaseModel):
    """Fully-defaulted player profile. Extra metafield keys are passed through."""
    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Shopify customer gid")
    name: str = Field(..., description="Resolved display name")
    level: int = Field(1, description="Pilot level")
    xp: int = Field(0, description="Experience points")
    victories: int = Field(0, description="Victory count")
    tier: str = Field("Recruit", description="Tier label")
    country: str = Field("Unknown", description="Country label")
    faction: str = Field("Independent", description="Faction label")
    avatar_url: str = Field("", description="Avatar image URL")
    car_image_url: str = Field("", description="Car image URL")
    achievements: List[Any] = Field(default_factory=list, description="Achievement records")
