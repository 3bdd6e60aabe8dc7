import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_admin.lib.database import commit_or_raise
from hostel_admin.lib.errors import (
    ConstraintViolationError,
    FormValidationError,
    InvalidReferenceError,
    NotFoundError,
    translate_store_error,
)
from hostel_admin.models.property import Property
from hostel_admin.models.room import Room

logger = logging.getLogger(__name__)


class RoomService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_rooms(self, pg_id: Optional[UUID] = None) -> Tuple[List[Room], int]:
        """List rooms, optionally for one property."""
        query = select(Room)
        if pg_id is not None:
            query = query.where(Room.pg_id == pg_id)
        query = query.order_by(Room.pg_id, Room.number)

        result = await self.db.execute(query)
        rooms = list(result.scalars().all())
        return rooms, len(rooms)

    async def get_room(self, room_id: UUID) -> Optional[Room]:
        result = await self.db.execute(select(Room).where(Room.id == room_id))
        return result.scalar_one_or_none()

    async def get_room_or_404(self, room_id: UUID) -> Room:
        room = await self.get_room(room_id)
        if not room:
            raise NotFoundError("Room", room_id)
        return room

    async def _check_property(self, pg_id: UUID) -> None:
        if await self.db.get(Property, pg_id) is None:
            raise InvalidReferenceError(f"PG '{pg_id}' does not exist", field="pg_id")

    async def number_exists(
        self, pg_id: UUID, number: str, exclude_id: Optional[UUID] = None
    ) -> bool:
        query = select(func.count(Room.id)).where(Room.pg_id == pg_id, Room.number == number)
        if exclude_id is not None:
            query = query.where(Room.id != exclude_id)
        result = await self.db.execute(query)
        return result.scalar_one() > 0

    async def create_room(self, fields: Dict[str, Any]) -> Room:
        await self._check_property(fields["pg_id"])
        if await self.number_exists(fields["pg_id"], fields["number"]):
            raise ConstraintViolationError(
                f"Room {fields['number']} already exists in this PG", field="number"
            )

        room = Room(**fields)
        self.db.add(room)
        await commit_or_raise(self.db, "room")
        await self.db.refresh(room)
        return room

    async def create_rooms(self, pg_id: UUID, rows: Sequence[Dict[str, Any]]) -> int:
        """Insert generated rooms for one property in a single transaction."""
        try:
            await self._check_property(pg_id)
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise translate_store_error(e, "room") from e

        for row in rows:
            self.db.add(Room(pg_id=pg_id, **row))
        await commit_or_raise(self.db, "room")

        logger.info("Generated %d room(s) for PG %s", len(rows), pg_id)
        return len(rows)

    async def update_room(self, room_id: UUID, fields: Dict[str, Any]) -> Room:
        room = await self.get_room_or_404(room_id)

        pg_id = fields.get("pg_id", room.pg_id)
        number = fields.get("number", room.number)
        if pg_id != room.pg_id:
            await self._check_property(pg_id)
        if (pg_id, number) != (room.pg_id, room.number) and await self.number_exists(
            pg_id, number, exclude_id=room.id
        ):
            raise ConstraintViolationError(
                f"Room {number} already exists in this PG", field="number"
            )

        for field, value in fields.items():
            setattr(room, field, value)

        await commit_or_raise(self.db, "room")
        await self.db.refresh(room)
        return room

    async def delete_room(self, room_id: UUID) -> None:
        room = await self.get_room_or_404(room_id)
        await self.db.delete(room)
        await commit_or_raise(self.db, "room")

    async def bulk_update_capacity(self, property_id: UUID, room_type: str, capacity: int) -> int:
        """
        Set ``capacity`` on every room of ``room_type`` in one property.

        Runs as one UPDATE statement in one transaction, so either all
        matching rooms change or none do. Returns the number of rooms updated.
        """
        if capacity < 1:
            raise FormValidationError(["Capacity must be at least 1."])
        try:
            if await self.db.get(Property, property_id) is None:
                raise NotFoundError("PG", property_id)
            result = await self.db.execute(
                update(Room)
                .where(Room.pg_id == property_id, Room.type == room_type)
                .values(capacity=capacity, updated_at=datetime.utcnow())
                .execution_options(synchronize_session="fetch")
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise translate_store_error(e, "room") from e

        logger.info(
            "Updated capacity of %d %s room(s) in PG %s to %d",
            result.rowcount, room_type, property_id, capacity,
        )
        return result.rowcount
