from datetime import datetime
from enum import Enum
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class PropertyType(str, Enum):
    """Who a property houses."""
    MALE = "male"
    FEMALE = "female"
    UNISEX = "unisex"


class RoomTypeTemplate(BaseModel):
    """Named capacity/price/amenity profile for a class of rooms."""
    id: Optional[str] = None
    name: str = ""
    capacity: int = 1
    price: float = 0
    amenities: List[str] = Field(default_factory=list)

    @field_validator('amenities', mode='before')
    @classmethod
    def coerce_amenities(cls, v: Any) -> List[str]:
        return v if isinstance(v, list) else []


class RoomTypeAllocation(BaseModel):
    room_type: str
    count: int = Field(default=0, ge=0)


class FloorAllocation(BaseModel):
    """How many rooms of each type to generate on one floor."""
    floor: int = Field(..., ge=0)
    rooms: List[RoomTypeAllocation] = Field(default_factory=list)


class PropertyForm(BaseModel):
    """Raw property form values; business rules live in the validation layer."""
    name: Optional[str] = None
    type: Optional[str] = None
    location: Optional[str] = None
    contact_info: Optional[str] = None
    total_rooms: Optional[int] = None
    total_beds: Optional[int] = None
    floors: Optional[int] = None
    manager_id: Optional[str] = None


class PropertySubmission(BaseModel):
    form: PropertyForm
    room_types: List[RoomTypeTemplate] = Field(default_factory=list)
    room_allocations: List[FloorAllocation] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)


class PropertyResponse(BaseModel):
    id: UUID
    name: str
    type: str
    location: str
    contact_info: str
    total_rooms: int
    total_beds: int
    floors: int
    images: List[str]
    amenities: List[str]
    room_types: List[RoomTypeTemplate]
    revenue: float
    occupancy_rate: float
    monthly_rent: float
    actual_occupancy: int
    total_capacity: int
    manager_id: Optional[UUID] = None
    manager: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PropertyListResponse(BaseModel):
    items: List[PropertyResponse]
    total: int


class PropertySaveResponse(BaseModel):
    property: PropertyResponse
    rooms_created: int = 0
    warnings: List[str] = []
