"""
Pydantic models for the customer update endpoints.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Any, List, Optional, Union

DEFAULT_METAFIELD_TYPE = "single_line_text_field"


class MetafieldInput(BaseModel):
    """A single key/value pair to write into the rc_arsenal namespace."""
    key: str = Field(..., min_length=1, description="Metafield key")
    value: Any = Field(..., description="Value; sent upstream as a string")
    type: Optional[str] = Field(None, description=f"Shopify metafield type (default: {DEFAULT_METAFIELD_TYPE})")

    @field_validator('value')
    @classmethod
    def validate_value_present(cls, v):
        if v is None:
            raise ValueError('value must not be null')
        return v


class CustomerUpdateRequest(BaseModel):
    """Request body for update-customer and admin-update."""
    customerId: Union[str, int] = Field(..., description="Bare customer id or customer gid")
    metafields: List[MetafieldInput] = Field(..., description="Metafields to write")

    @field_validator('metafields')
    @classmethod
    def validate_metafields_length(cls, v):
        if len(v) == 0:
            raise ValueError('At least one metafield must be provided')
        return v


class CustomerUpdateResponse(BaseModel):
    success: bool = Field(..., description="Always true on success")
    id: str = Field(..., description="Updated customer gid")
