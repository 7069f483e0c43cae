"""Pydantic v2 request/response schemas for villa number endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import inspect

from app.models.villa_number import VillaNumber
from app.schemas.villa import VillaResponse

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class VillaNumberCreate(BaseModel):
    """Schema for creating a villa number. The number is the caller's key."""

    villa_no: int = Field(..., gt=0)
    villa_id: int = Field(..., gt=0)
    special_details: str | None = None

    model_config = ConfigDict(extra="forbid")


class VillaNumberUpdate(BaseModel):
    """Full post-mutation state of a villa number; also the patchable view."""

    villa_no: int = Field(..., gt=0)
    villa_id: int = Field(..., gt=0)
    special_details: str | None = None

    model_config = ConfigDict(from_attributes=True, validate_assignment=True)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class VillaNumberResponse(BaseModel):
    """Public villa number information, with the parent villa when it was loaded."""

    villa_no: int
    villa_id: int
    special_details: str | None = None
    created_date: datetime
    updated_date: datetime
    villa: VillaResponse | None = None

    @classmethod
    def from_entity(cls, entity: VillaNumber) -> "VillaNumberResponse":
        """Build a response without triggering a load of an unrequested parent."""
        villa = None
        if "villa" not in inspect(entity).unloaded and entity.villa is not None:
            villa = VillaResponse.model_validate(entity.villa)
        return cls(
            villa_no=entity.villa_no,
            villa_id=entity.villa_id,
            special_details=entity.special_details,
            created_date=entity.created_date,
            updated_date=entity.updated_date,
            villa=villa,
        )
