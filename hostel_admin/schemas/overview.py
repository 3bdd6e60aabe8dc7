from typing import List
from uuid import UUID

from pydantic import BaseModel


class PropertyStatsResponse(BaseModel):
    property_id: UUID
    name: str
    room_count: int
    total_capacity: int
    actual_occupancy: int
    occupancy_rate: float
    monthly_rent: float
    revenue: float


class OverviewResponse(BaseModel):
    properties: List[PropertyStatsResponse]
    total_properties: int
    total_rooms: int
    total_users: int
    total_capacity: int
    actual_occupancy: int
    occupancy_rate: float
    revenue: float
