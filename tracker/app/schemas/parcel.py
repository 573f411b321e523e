"""
Parcel Pydantic schemas.

Defines the parcel value objects used by the store and the API payloads.
"""

from datetime import datetime, timezone
from pydantic import BaseModel, Field
from typing import List
from tracker.app.models.parcel_enums import ParcelStatus


def utc_timestamp() -> str:
    """Current UTC time in RFC 3339 form (second precision)."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class ParcelCreate(BaseModel):
    """A parcel that has not been stored yet."""
    client: int = Field(..., description="Owning client ID")
    status: str = Field(default=ParcelStatus.REGISTERED.value, description="Lifecycle status")
    address: str = Field(..., description="Delivery address")
    created_at: str = Field(default_factory=utc_timestamp, description="RFC 3339 creation time")


class ParcelRead(ParcelCreate):
    """A stored parcel."""
    number: int


class ParcelRegister(BaseModel):
    """Schema for registering a new parcel over the API."""
    client: int
    address: str


class ParcelAddressUpdate(BaseModel):
    """Schema for changing a parcel's address."""
    address: str


class ParcelStatusUpdate(BaseModel):
    """Schema for overwriting a parcel's status."""
    status: str


class ParcelListResponse(BaseModel):
    """Schema for a client's parcel list."""
    parcels: List[ParcelRead]
    total: int
