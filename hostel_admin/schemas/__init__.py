from hostel_admin.schemas.auth import LoginRequest, LoginResponse
from hostel_admin.schemas.overview import OverviewResponse, PropertyStatsResponse
from hostel_admin.schemas.property import (
    FloorAllocation,
    PropertyForm,
    PropertyListResponse,
    PropertyResponse,
    PropertySaveResponse,
    PropertySubmission,
    PropertyType,
    RoomTypeAllocation,
    RoomTypeTemplate,
)
from hostel_admin.schemas.room import (
    BulkCapacityRequest,
    BulkCapacityResponse,
    RoomForm,
    RoomListResponse,
    RoomResponse,
    RoomStatus,
)
from hostel_admin.schemas.user import (
    CurrentUser,
    PropertyAssignment,
    UserCreate,
    UserListResponse,
    UserResponse,
    UserRole,
    UserUpdate,
)

__all__ = [
    "LoginRequest",
    "LoginResponse",
    "OverviewResponse",
    "PropertyStatsResponse",
    "FloorAllocation",
    "PropertyForm",
    "PropertyListResponse",
    "PropertyResponse",
    "PropertySaveResponse",
    "PropertySubmission",
    "PropertyType",
    "RoomTypeAllocation",
    "RoomTypeTemplate",
    "BulkCapacityRequest",
    "BulkCapacityResponse",
    "RoomForm",
    "RoomListResponse",
    "RoomResponse",
    "RoomStatus",
    "CurrentUser",
    "PropertyAssignment",
    "UserCreate",
    "UserListResponse",
    "UserResponse",
    "UserRole",
    "UserUpdate",
]
