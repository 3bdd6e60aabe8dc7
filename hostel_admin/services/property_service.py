import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_admin.lib.database import commit_or_raise
from hostel_admin.lib.errors import (
    AdminError,
    ConstraintViolationError,
    InvalidReferenceError,
    NotFoundError,
    PartialFailureError,
)
from hostel_admin.models.property import Property
from hostel_admin.models.room import Room
from hostel_admin.models.user import User
from hostel_admin.services.room_service import RoomService

logger = logging.getLogger(__name__)


class PropertyService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_properties(self) -> Tuple[List[Property], int]:
        """List all properties ordered by name."""
        result = await self.db.execute(select(Property).order_by(Property.name))
        properties = list(result.scalars().all())
        return properties, len(properties)

    async def get_property(self, property_id: UUID) -> Optional[Property]:
        result = await self.db.execute(
            select(Property).where(Property.id == property_id)
        )
        return result.scalar_one_or_none()

    async def get_property_or_404(self, property_id: UUID) -> Property:
        prop = await self.get_property(property_id)
        if not prop:
            raise NotFoundError("PG", property_id)
        return prop

    async def name_exists(self, name: str, exclude_id: Optional[UUID] = None) -> bool:
        """Check if another property already uses this name."""
        query = select(func.count(Property.id)).where(Property.name == name)
        if exclude_id is not None:
            query = query.where(Property.id != exclude_id)
        result = await self.db.execute(query)
        return result.scalar_one() > 0

    async def _check_manager(self, manager_id: Optional[UUID]) -> None:
        if manager_id is None:
            return
        if await self.db.get(User, manager_id) is None:
            raise InvalidReferenceError(
                f"Manager '{manager_id}' does not exist", field="manager_id"
            )

    async def create_property(self, fields: Dict[str, Any]) -> Property:
        """Create a property; the store assigns the id."""
        if await self.name_exists(fields["name"]):
            raise ConstraintViolationError(
                f"A PG named '{fields['name']}' already exists", field="name"
            )
        await self._check_manager(fields.get("manager_id"))

        prop = Property(**fields)
        self.db.add(prop)
        await commit_or_raise(self.db, "PG")
        await self.db.refresh(prop)

        logger.info("Created PG %s (%s)", prop.name, prop.id)
        return prop

    async def create_property_with_rooms(
        self, fields: Dict[str, Any], room_rows: Sequence[Dict[str, Any]]
    ) -> Tuple[Property, int]:
        """
        Create a property, then generate its rooms.

        The property is committed first. If room generation fails the
        property stays and PartialFailureError carries it to the caller.
        """
        prop = await self.create_property(fields)
        if not room_rows:
            return prop, 0

        name = prop.name
        try:
            created = await RoomService(self.db).create_rooms(prop.id, room_rows)
        except (AdminError, SQLAlchemyError) as e:
            logger.warning("PG %s created but room generation failed: %s", name, e)
            await self.db.rollback()
            # rollback expired the committed property; reload it for the caller
            await self.db.refresh(prop)
            raise PartialFailureError(
                prop,
                f"{name} was created but some rooms could not be generated. "
                "You can add rooms manually from the Room Management page.",
            ) from e

        return prop, created

    async def update_property(self, property_id: UUID, fields: Dict[str, Any]) -> Property:
        """Update property fields; only keys present in ``fields`` change."""
        prop = await self.get_property_or_404(property_id)

        name = fields.get("name")
        if name and name != prop.name and await self.name_exists(name, exclude_id=prop.id):
            raise ConstraintViolationError(f"A PG named '{name}' already exists", field="name")
        if "manager_id" in fields:
            await self._check_manager(fields["manager_id"])

        for field, value in fields.items():
            setattr(prop, field, value)

        await commit_or_raise(self.db, "PG")
        await self.db.refresh(prop)
        return prop

    async def delete_property(self, property_id: UUID) -> int:
        """Delete a property and every room that references it. Returns rooms removed."""
        prop = await self.get_property_or_404(property_id)

        result = await self.db.execute(delete(Room).where(Room.pg_id == prop.id))
        await self.db.delete(prop)
        await commit_or_raise(self.db, "PG")

        logger.info("Deleted PG %s and %d room(s)", prop.name, result.rowcount)
        return result.rowcount
