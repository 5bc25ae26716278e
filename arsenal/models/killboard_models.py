"""
Pydantic models for the killboard endpoint.
"""
from pydantic import BaseModel, Field
from typing import Optional


class KillboardEntry(BaseModel):
    """Model for a single killboard row."""
    id: str = Field(..., description="Shopify customer gid")
    name: str = Field(..., description="Pilot display name")
    level: int = Field(1, description="Pilot level")
    xp: int = Field(0, description="Experience points")
    victories: int = Field(0, description="Victory count, the ranking key")
    tier: str = Field("Recruit", description="Tier label")
    country: str = Field("Unknown", description="Country label")
    avatar: Optional[str] = Field(None, description="Avatar image URL")
