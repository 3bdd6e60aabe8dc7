"""
Submit pipelines shared by the HTTP API and the embedded admin context:
validate -> map -> persist -> propagate.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_admin.lib.errors import (
    AdminError,
    FormValidationError,
    InvalidReferenceError,
    PartialFailureError,
)
from hostel_admin.models.property import Property
from hostel_admin.models.room import Room
from hostel_admin.schemas.property import PropertySubmission
from hostel_admin.schemas.room import RoomForm
from hostel_admin.services.auth_service import Permissions
from hostel_admin.services.mapper import map_property, map_room, rooms_from_allocations
from hostel_admin.services.property_service import PropertyService
from hostel_admin.services.reconciliation_service import CapacityChange, ReconciliationService
from hostel_admin.services.room_service import RoomService
from hostel_admin.services.user_service import UserService
from hostel_admin.services.validation import (
    validate_property_form,
    validate_room_form,
    validate_room_type_templates,
)

logger = logging.getLogger(__name__)

MANAGER_UNAVAILABLE = "Selected manager is not available. Saving PG without manager assignment."
CAPACITY_NOT_APPLIED = "Room capacity updates may not have been fully applied to all rooms."


@dataclass
class SaveOutcome:
    property: Property
    created: bool
    rooms_created: int = 0
    capacity_changes: List[CapacityChange] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class PropertyWorkflow:
    def __init__(
        self,
        db: AsyncSession,
        permissions: Permissions,
        reconciler: Optional[ReconciliationService] = None,
    ):
        self.db = db
        self.permissions = permissions
        self.properties = PropertyService(db)
        self.users = UserService(db)
        self.reconciler = reconciler or ReconciliationService()

    async def save(
        self, submission: PropertySubmission, property_id: Optional[UUID] = None
    ) -> SaveOutcome:
        """
        Create (no ``property_id``) or update a property from a form submission.

        Floor allocations are only honoured on create. On update, capacity
        edits to existing room-type templates are pushed to matching rooms.
        """
        values = submission.form.model_dump()
        result = validate_property_form(values)
        errors = result.errors + validate_room_type_templates(
            [t.model_dump() for t in submission.room_types]
        )
        if errors:
            raise FormValidationError(errors)

        existing = None
        if property_id is None:
            self.permissions.require_admin("create PGs")
        else:
            existing = await self.properties.get_property_or_404(property_id)
            self.permissions.require_property_access(existing.name, "update PGs")

        draft = map_property(
            result.values,
            room_types=submission.room_types,
            images=submission.images,
            managers=await self.users.list_managers(),
            existing=existing,
        )

        warnings = []
        if draft.manager_unavailable:
            warnings.append(MANAGER_UNAVAILABLE)

        if draft.is_create:
            rows = rooms_from_allocations(submission.room_allocations, submission.room_types)
            try:
                prop, rooms_created = await self.properties.create_property_with_rooms(
                    draft.fields, rows
                )
            except PartialFailureError as e:
                prop, rooms_created = e.entity, 0
                warnings.append(e.reason)
            return SaveOutcome(prop, True, rooms_created=rooms_created, warnings=warnings)

        old_templates = list(existing.room_types or [])
        prop = await self.properties.update_property(draft.id, draft.fields)

        try:
            changes = await self.reconciler.propagate_capacity_changes(
                self.db, prop.id, old_templates, draft.fields["room_types"]
            )
        except (AdminError, SQLAlchemyError) as e:
            logger.error("Error updating room capacities for %s: %s", prop.id, e)
            await self.db.rollback()
            await self.db.refresh(prop)
            changes = []
            warnings.append(CAPACITY_NOT_APPLIED)

        return SaveOutcome(prop, False, capacity_changes=changes, warnings=warnings)

    async def delete(self, property_id: UUID) -> int:
        self.permissions.require_admin("delete PGs")
        return await self.properties.delete_property(property_id)


class RoomWorkflow:
    def __init__(self, db: AsyncSession, permissions: Permissions):
        self.db = db
        self.permissions = permissions
        self.properties = PropertyService(db)
        self.rooms = RoomService(db)

    async def _property_for(self, pg_id) -> Property:
        prop = await self.properties.get_property(pg_id)
        if prop is None:
            raise InvalidReferenceError(f"PG '{pg_id}' does not exist", field="pg_id")
        return prop

    async def save(self, form: RoomForm, room_id: Optional[UUID] = None) -> Room:
        result = validate_room_form(form.model_dump())
        if not result.ok:
            raise FormValidationError(result.errors)

        existing = await self.rooms.get_room_or_404(room_id) if room_id else None
        draft = map_room(result.values, existing=existing)

        target = await self._property_for(draft.fields["pg_id"])
        self.permissions.require_property_access(target.name, "manage rooms")
        if existing is not None and existing.pg_id != target.id:
            source = await self._property_for(existing.pg_id)
            self.permissions.require_property_access(source.name, "manage rooms")

        if draft.is_create:
            return await self.rooms.create_room(draft.fields)
        return await self.rooms.update_room(draft.id, draft.fields)

    async def delete(self, room_id: UUID) -> None:
        room = await self.rooms.get_room_or_404(room_id)
        prop = await self._property_for(room.pg_id)
        self.permissions.require_property_access(prop.name, "manage rooms")
        await self.rooms.delete_room(room_id)

    async def update_capacity(self, pg_id: UUID, room_type: str, capacity: int) -> int:
        prop = await self.properties.get_property_or_404(pg_id)
        self.permissions.require_property_access(prop.name, "manage rooms")
        return await self.rooms.bulk_update_capacity(pg_id, room_type, capacity)
