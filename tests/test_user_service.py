from uuid import uuid4

import pytest

from hostel_admin.lib.errors import ConstraintViolationError, FormValidationError, NotFoundError
from hostel_admin.services.property_service import PropertyService
from hostel_admin.services.user_service import UserService

from tests.factories import property_fields


class TestUserService:
    @pytest.mark.asyncio
    async def test_email_is_normalized_and_unique(self, db):
        service = UserService(db)
        user = await service.create_user(name="Priya", email=" Priya@Example.com ", role="manager")

        assert user.email == "priya@example.com"
        with pytest.raises(ConstraintViolationError):
            await service.create_user(name="Other", email="priya@example.com", role="viewer")

    @pytest.mark.asyncio
    async def test_admin_has_no_assignments(self, db):
        service = UserService(db)
        admin = await service.create_user(name="Root", email="root@example.com", role="admin", assigned_pgs=["Sunrise PG"])

        assert admin.assigned_pgs == []
        admin = await service.assign_property(admin.id, "Sunrise PG")
        assert admin.assigned_pgs == []

    @pytest.mark.asyncio
    async def test_promotion_to_admin_clears_assignments(self, db):
        service = UserService(db)
        user = await service.create_user(name="Priya", email="priya@example.com", role="manager", assigned_pgs=["Sunrise PG"])

        user = await service.update_user(user.id, {"role": "admin"})

        assert user.assigned_pgs == []

    @pytest.mark.asyncio
    async def test_unknown_role_is_rejected(self, db):
        service = UserService(db)

        with pytest.raises(FormValidationError) as exc_info:
            await service.create_user(name="Root", email="root@example.com", role="superuser")

        assert "Invalid role 'superuser'" in exc_info.value.errors[0]
        assert await service.get_user_by_email("root@example.com") is None

    @pytest.mark.asyncio
    async def test_update_to_unknown_role_is_rejected(self, db):
        service = UserService(db)
        user = await service.create_user(name="Priya", email="priya@example.com", role="manager")

        with pytest.raises(FormValidationError):
            await service.update_user(user.id, {"role": "owner"})

        await db.refresh(user)
        assert user.role == "manager"

    @pytest.mark.asyncio
    async def test_assign_is_idempotent(self, db):
        service = UserService(db)
        user = await service.create_user(name="Priya", email="priya@example.com", role="manager")

        await service.assign_property(user.id, "Sunrise PG")
        user = await service.assign_property(user.id, "Sunrise PG")

        assert user.assigned_pgs == ["Sunrise PG"]

    @pytest.mark.asyncio
    async def test_remove_absent_name_is_noop(self, db):
        service = UserService(db)
        user = await service.create_user(name="Priya", email="priya@example.com", role="manager", assigned_pgs=["A", "B"])

        user = await service.remove_property(user.id, "C")
        assert user.assigned_pgs == ["A", "B"]
        user = await service.remove_property(user.id, "A")
        assert user.assigned_pgs == ["B"]

    @pytest.mark.asyncio
    async def test_delete_unsets_property_manager(self, db):
        users = UserService(db)
        manager = await users.create_user(name="Priya", email="priya@example.com", role="manager")
        properties = PropertyService(db)
        prop = await properties.create_property(property_fields(manager_id=manager.id, manager=manager.name))

        await users.delete_user(manager.id)

        prop = await properties.get_property(prop.id)
        await db.refresh(prop)
        assert prop.manager_id is None
        assert prop.manager is None

    @pytest.mark.asyncio
    async def test_missing_user(self, db):
        with pytest.raises(NotFoundError):
            await UserService(db).update_user(uuid4(), {"name": "x"})
