from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator


class UserRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    ACCOUNTANT = "accountant"
    VIEWER = "viewer"


class CurrentUser(BaseModel):
    """Resolved identity of the signed-in account."""
    id: str
    name: str
    email: str
    role: UserRole
    status: str = "active"
    last_login: Optional[str] = None
    assigned_pgs: List[str] = Field(default_factory=list)

    @field_validator('assigned_pgs', mode='before')
    @classmethod
    def coerce_assigned(cls, v) -> List[str]:
        return [str(name) for name in v] if isinstance(v, list) else []

    @classmethod
    def from_account(cls, user) -> "CurrentUser":
        return cls(
            id=str(user.id),
            name=user.name,
            email=user.email,
            role=user.role,
            status=user.status or "active",
            last_login=user.last_login.isoformat() if user.last_login else None,
            assigned_pgs=user.assigned_pgs or [],
        )


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=255)
    role: UserRole = UserRole.VIEWER
    assigned_pgs: List[str] = Field(default_factory=list)


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    status: Optional[str] = None
    assigned_pgs: Optional[List[str]] = None


class PropertyAssignment(BaseModel):
    property_name: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    id: UUID
    name: str
    email: str
    role: str
    status: str
    assigned_pgs: List[str]
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserListResponse(BaseModel):
    items: List[UserResponse]
    total: int
