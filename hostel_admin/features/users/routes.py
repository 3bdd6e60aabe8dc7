from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_admin.lib.database import get_db
from hostel_admin.lib.deps import get_provider, require_admin
from hostel_admin.lib.identity import IdentityProvider
from hostel_admin.schemas.user import (
    CurrentUser,
    PropertyAssignment,
    UserCreate,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from hostel_admin.services.auth_service import AuthService
from hostel_admin.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=UserListResponse)
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    service = UserService(db)
    users, total = await service.list_users()

    return UserListResponse(
        items=[UserResponse.model_validate(u) for u in users],
        total=total,
    )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
    provider: Optional[IdentityProvider] = Depends(get_provider),
    current_user: CurrentUser = Depends(require_admin),
):
    """
    Create an account. Admin only.
    The identity is registered with the provider when one is configured.
    """
    service = AuthService(db, provider)
    user = await service.register_user(
        data.email, data.password, data.name, data.role.value, data.assigned_pgs
    )
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    service = UserService(db)
    user = await service.get_user_or_404(user_id)
    return UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    service = UserService(db)
    user = await service.update_user(user_id, data.model_dump(exclude_unset=True, mode="json"))
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """
    Delete an account. PGs it managed are left without a manager.
    """
    service = UserService(db)
    await service.delete_user(user_id)


@router.post("/{user_id}/properties", response_model=UserResponse)
async def assign_property(
    user_id: UUID,
    data: PropertyAssignment,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    service = UserService(db)
    user = await service.assign_property(user_id, data.property_name)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}/properties/{property_name}", response_model=UserResponse)
async def remove_property(
    user_id: UUID,
    property_name: str,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    service = UserService(db)
    user = await service.remove_property(user_id, property_name)
    return UserResponse.model_validate(user)
