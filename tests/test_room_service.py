from uuid import uuid4

import pytest
import pytest_asyncio

from hostel_admin.lib.errors import (
    ConstraintViolationError,
    FormValidationError,
    InvalidReferenceError,
    NotFoundError,
    StoreError,
)
from hostel_admin.services.property_service import PropertyService
from hostel_admin.services.room_service import RoomService

from tests.factories import fail_update_statements, locked_database, property_fields, room_row


@pytest_asyncio.fixture
async def pg(db):
    prop, _ = await PropertyService(db).create_property_with_rooms(
        property_fields(),
        [
            room_row("101", "Single", 1),
            room_row("102", "Double", 2),
            room_row("103", "Double", 2),
        ],
    )
    return prop


class TestRoomService:
    @pytest.mark.asyncio
    async def test_list_for_property(self, db, pg):
        other = await PropertyService(db).create_property(property_fields("Other PG"))
        await RoomService(db).create_room({**room_row("1"), "pg_id": other.id})

        rooms, total = await RoomService(db).list_rooms(pg_id=pg.id)

        assert total == 3
        assert [r.number for r in rooms] == ["101", "102", "103"]

    @pytest.mark.asyncio
    async def test_duplicate_number_in_same_property(self, db, pg):
        with pytest.raises(ConstraintViolationError):
            await RoomService(db).create_room({**room_row("101"), "pg_id": pg.id})

    @pytest.mark.asyncio
    async def test_unknown_property(self, db):
        with pytest.raises(InvalidReferenceError) as exc_info:
            await RoomService(db).create_room({**room_row("101"), "pg_id": uuid4()})
        assert exc_info.value.field == "pg_id"

    @pytest.mark.asyncio
    async def test_bulk_capacity_only_touches_matching_type(self, db, pg):
        service = RoomService(db)

        updated = await service.bulk_update_capacity(pg.id, "Double", 4)

        assert updated == 2
        rooms, _ = await service.list_rooms(pg_id=pg.id)
        assert {r.number: r.capacity for r in rooms} == {"101": 1, "102": 4, "103": 4}

    @pytest.mark.asyncio
    async def test_bulk_capacity_rejects_zero(self, db, pg):
        with pytest.raises(FormValidationError):
            await RoomService(db).bulk_update_capacity(pg.id, "Double", 0)

    @pytest.mark.asyncio
    async def test_bulk_capacity_missing_property(self, db):
        with pytest.raises(NotFoundError):
            await RoomService(db).bulk_update_capacity(uuid4(), "Double", 2)

    @pytest.mark.asyncio
    async def test_bulk_capacity_store_failure_is_typed_and_rolled_back(self, db, pg, monkeypatch):
        service = RoomService(db)
        fail_update_statements(monkeypatch)

        with pytest.raises(StoreError) as exc_info:
            await service.bulk_update_capacity(pg.id, "Double", 4)

        assert "database is locked" in str(exc_info.value)
        rooms, _ = await service.list_rooms(pg_id=pg.id)
        assert {r.number: r.capacity for r in rooms} == {"101": 1, "102": 2, "103": 2}

    @pytest.mark.asyncio
    async def test_generation_store_failure_is_typed(self, db, pg, monkeypatch):
        async def commit():
            raise locked_database("INSERT INTO rooms")

        monkeypatch.setattr(db, "commit", commit)

        with pytest.raises(StoreError):
            await RoomService(db).create_rooms(pg.id, [room_row("104")])

    @pytest.mark.asyncio
    async def test_delete_room(self, db, pg):
        service = RoomService(db)
        rooms, _ = await service.list_rooms(pg_id=pg.id)

        await service.delete_room(rooms[0].id)

        assert await service.get_room(rooms[0].id) is None
