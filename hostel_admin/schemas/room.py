from datetime import datetime
from enum import Enum
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class RoomStatus(str, Enum):
    """Room occupancy status."""
    VACANT = "vacant"
    PARTIAL = "partial"
    FULL = "full"
    MAINTENANCE = "maintenance"


# Types offered by the room form; the column itself is free text
ROOM_TYPE_CHOICES = ("Single", "Double", "Triple", "Quad")


class RoomForm(BaseModel):
    number: Optional[str] = None
    type: Optional[str] = None
    capacity: Optional[int] = None
    rent: Optional[float] = None
    pg_id: Optional[str] = None
    status: Optional[str] = None


class RoomResponse(BaseModel):
    id: UUID
    pg_id: UUID
    number: str
    type: str
    capacity: int
    rent: float
    status: str
    students: List[Any]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RoomListResponse(BaseModel):
    items: List[RoomResponse]
    total: int


class BulkCapacityRequest(BaseModel):
    pg_id: UUID
    room_type: str = Field(..., min_length=1)
    capacity: int = Field(..., ge=1)


class BulkCapacityResponse(BaseModel):
    updated: int
