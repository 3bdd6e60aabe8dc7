from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_admin.lib.database import get_db
from hostel_admin.lib.deps import get_current_user, get_permissions
from hostel_admin.schemas.room import (
    BulkCapacityRequest,
    BulkCapacityResponse,
    RoomForm,
    RoomListResponse,
    RoomResponse,
)
from hostel_admin.schemas.user import CurrentUser
from hostel_admin.services.auth_service import Permissions
from hostel_admin.services.room_service import RoomService
from hostel_admin.services.workflows import RoomWorkflow

router = APIRouter(prefix="/rooms", tags=["Rooms"])


@router.get("", response_model=RoomListResponse)
async def list_rooms(
    pg_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    List rooms, optionally restricted to one PG.
    """
    service = RoomService(db)
    rooms, total = await service.list_rooms(pg_id=pg_id)

    return RoomListResponse(
        items=[RoomResponse.model_validate(r) for r in rooms],
        total=total,
    )


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
async def create_room(
    data: RoomForm,
    db: AsyncSession = Depends(get_db),
    permissions: Permissions = Depends(get_permissions),
):
    room = await RoomWorkflow(db, permissions).save(data)
    return RoomResponse.model_validate(room)


@router.post("/capacity", response_model=BulkCapacityResponse)
async def update_capacity(
    data: BulkCapacityRequest,
    db: AsyncSession = Depends(get_db),
    permissions: Permissions = Depends(get_permissions),
):
    """
    Set the capacity of every room of one type in a PG.
    """
    updated = await RoomWorkflow(db, permissions).update_capacity(
        data.pg_id, data.room_type, data.capacity
    )
    return BulkCapacityResponse(updated=updated)


@router.get("/{room_id}", response_model=RoomResponse)
async def get_room(
    room_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    service = RoomService(db)
    room = await service.get_room_or_404(room_id)
    return RoomResponse.model_validate(room)


@router.put("/{room_id}", response_model=RoomResponse)
async def update_room(
    room_id: UUID,
    data: RoomForm,
    db: AsyncSession = Depends(get_db),
    permissions: Permissions = Depends(get_permissions),
):
    room = await RoomWorkflow(db, permissions).save(data, room_id)
    return RoomResponse.model_validate(room)


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room(
    room_id: UUID,
    db: AsyncSession = Depends(get_db),
    permissions: Permissions = Depends(get_permissions),
):
    await RoomWorkflow(db, permissions).delete(room_id)
