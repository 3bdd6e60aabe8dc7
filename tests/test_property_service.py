from uuid import uuid4

import pytest
from sqlalchemy import func, select

from hostel_admin.lib.errors import (
    ConstraintViolationError,
    InvalidReferenceError,
    NotFoundError,
    PartialFailureError,
)
from hostel_admin.models.room import Room
from hostel_admin.services.property_service import PropertyService

from tests.factories import property_fields, room_row


class TestPropertyService:
    @pytest.mark.asyncio
    async def test_create_and_list(self, db):
        service = PropertyService(db)
        await service.create_property(property_fields("Zen Stay"))
        await service.create_property(property_fields("Alpha House"))

        properties, total = await service.list_properties()

        assert total == 2
        assert [p.name for p in properties] == ["Alpha House", "Zen Stay"]

    @pytest.mark.asyncio
    async def test_duplicate_name(self, db):
        service = PropertyService(db)
        await service.create_property(property_fields())

        with pytest.raises(ConstraintViolationError) as exc_info:
            await service.create_property(property_fields())
        assert exc_info.value.field == "name"

    @pytest.mark.asyncio
    async def test_unknown_manager(self, db):
        service = PropertyService(db)

        with pytest.raises(InvalidReferenceError) as exc_info:
            await service.create_property(property_fields(manager_id=uuid4()))
        assert exc_info.value.field == "manager_id"

    @pytest.mark.asyncio
    async def test_create_with_rooms(self, db):
        service = PropertyService(db)
        prop, created = await service.create_property_with_rooms(
            property_fields(), [room_row("101"), room_row("102")]
        )

        assert created == 2
        count = await db.execute(select(func.count(Room.id)).where(Room.pg_id == prop.id))
        assert count.scalar_one() == 2

    @pytest.mark.asyncio
    async def test_room_failure_keeps_property(self, db):
        service = PropertyService(db)

        with pytest.raises(PartialFailureError) as exc_info:
            await service.create_property_with_rooms(
                property_fields(), [room_row("101"), room_row("101")]
            )

        error = exc_info.value
        assert error.entity.name == "Sunrise PG"
        assert "Room Management page" in error.reason
        assert await service.name_exists("Sunrise PG")

    @pytest.mark.asyncio
    async def test_update_rejects_taken_name(self, db):
        service = PropertyService(db)
        await service.create_property(property_fields("Alpha House"))
        prop = await service.create_property(property_fields("Zen Stay"))

        with pytest.raises(ConstraintViolationError):
            await service.update_property(prop.id, {"name": "Alpha House"})

    @pytest.mark.asyncio
    async def test_delete_removes_rooms(self, db):
        service = PropertyService(db)
        prop, _ = await service.create_property_with_rooms(
            property_fields(), [room_row("101"), room_row("102"), room_row("103")]
        )

        removed = await service.delete_property(prop.id)

        assert removed == 3
        assert await service.get_property(prop.id) is None
        count = await db.execute(select(func.count(Room.id)))
        assert count.scalar_one() == 0

    @pytest.mark.asyncio
    async def test_delete_missing(self, db):
        with pytest.raises(NotFoundError):
            await PropertyService(db).delete_property(uuid4())
