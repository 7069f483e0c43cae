"""Pydantic v2 request/response schemas for villa endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class VillaCreate(BaseModel):
    """Schema for creating a villa. Identifiers are generated, never supplied."""

    name: str = Field(..., min_length=1, max_length=30)
    details: str | None = None
    rate: float = Field(0.0, ge=0)
    sqft: int = Field(0, ge=0)
    occupancy: int = Field(0, ge=0)
    image_url: str | None = Field(None, max_length=512)
    amenity: str | None = Field(None, max_length=255)

    model_config = ConfigDict(extra="forbid")


class VillaUpdate(BaseModel):
    """Full post-mutation state of a villa; also the partial view patched in place."""

    id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=30)
    details: str | None = None
    rate: float = Field(..., ge=0)
    sqft: int = Field(..., ge=0)
    occupancy: int = Field(..., ge=0)
    image_url: str | None = Field(None, max_length=512)
    amenity: str | None = Field(None, max_length=255)

    model_config = ConfigDict(from_attributes=True, validate_assignment=True)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class VillaResponse(BaseModel):
    """Public villa information returned from the API."""

    id: int
    name: str
    details: str | None = None
    rate: float
    sqft: int
    occupancy: int
    image_url: str | None = None
    amenity: str | None = None
    created_date: datetime
    updated_date: datetime

    model_config = ConfigDict(from_attributes=True)
