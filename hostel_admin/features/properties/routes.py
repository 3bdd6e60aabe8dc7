from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_admin.lib.database import get_db
from hostel_admin.lib.deps import get_current_user, get_permissions
from hostel_admin.schemas.property import (
    PropertyListResponse,
    PropertyResponse,
    PropertySaveResponse,
    PropertySubmission,
)
from hostel_admin.schemas.user import CurrentUser
from hostel_admin.services.auth_service import Permissions
from hostel_admin.services.property_service import PropertyService
from hostel_admin.services.workflows import PropertyWorkflow, SaveOutcome

router = APIRouter(prefix="/properties", tags=["Properties"])


def _save_response(outcome: SaveOutcome) -> PropertySaveResponse:
    return PropertySaveResponse(
        property=PropertyResponse.model_validate(outcome.property),
        rooms_created=outcome.rooms_created,
        warnings=outcome.warnings,
    )


@router.get("", response_model=PropertyListResponse)
async def list_properties(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    service = PropertyService(db)
    properties, total = await service.list_properties()

    return PropertyListResponse(
        items=[PropertyResponse.model_validate(p) for p in properties],
        total=total,
    )


@router.post("", response_model=PropertySaveResponse, status_code=status.HTTP_201_CREATED)
async def create_property(
    data: PropertySubmission,
    db: AsyncSession = Depends(get_db),
    permissions: Permissions = Depends(get_permissions),
):
    """
    Create a PG and generate its rooms from the floor allocations. Admin only.
    If room generation fails the PG is kept and a warning is returned.
    """
    outcome = await PropertyWorkflow(db, permissions).save(data)
    return _save_response(outcome)


@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    service = PropertyService(db)
    prop = await service.get_property_or_404(property_id)
    return PropertyResponse.model_validate(prop)


@router.put("/{property_id}", response_model=PropertySaveResponse)
async def update_property(
    property_id: UUID,
    data: PropertySubmission,
    db: AsyncSession = Depends(get_db),
    permissions: Permissions = Depends(get_permissions),
):
    """
    Update a PG. Admins, or managers assigned to it.
    Room-type capacity edits are applied to the matching rooms.
    """
    outcome = await PropertyWorkflow(db, permissions).save(data, property_id)
    return _save_response(outcome)


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_property(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
    permissions: Permissions = Depends(get_permissions),
):
    """
    Delete a PG together with all of its rooms. Admin only.
    """
    await PropertyWorkflow(db, permissions).delete(property_id)
