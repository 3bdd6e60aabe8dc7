import asyncio
from uuid import uuid4

import pytest
import pytest_asyncio

from hostel_admin.context import AppContext
from hostel_admin.lib.notifications import Severity
from hostel_admin.schemas.property import (
    FloorAllocation,
    PropertyForm,
    PropertySubmission,
    RoomTypeAllocation,
    RoomTypeTemplate,
)
from hostel_admin.schemas.room import RoomForm
from hostel_admin.services.workflows import CAPACITY_NOT_APPLIED, MANAGER_UNAVAILABLE

from tests.factories import fail_update_statements


def submission(name="Sunrise PG", floors=None, manager_id=None, form_overrides=None, capacity=1):
    form = {"name": name, "type": "male", "location": "MG Road", "total_rooms": 2, "floors": 1, "manager_id": manager_id}
    form.update(form_overrides or {})
    return PropertySubmission(
        form=PropertyForm(**form),
        room_types=[RoomTypeTemplate(id="s", name="Single", capacity=capacity, price=8000)],
        room_allocations=floors if floors is not None else [
            FloorAllocation(floor=1, rooms=[RoomTypeAllocation(room_type="Single", count=2)]),
        ],
    )


@pytest_asyncio.fixture
async def ctx(session_factory, notifier, store):
    context = AppContext(session_factory=session_factory, notifier=notifier, store=store)
    await context.login("admin@hosteladmin.dev", "password")
    return context


class TestPropertyFormController:
    @pytest.mark.asyncio
    async def test_create_reports_success_and_reloads(self, ctx, notifier):
        prop = await ctx.properties.submit(submission())

        assert prop is not None
        assert ("Success", "Sunrise PG has been created successfully with 2 rooms.", Severity.SUCCESS) in notifier.messages
        assert [p.name for p in ctx.read_model.properties] == ["Sunrise PG"]
        assert len(ctx.read_model.rooms) == 2

    @pytest.mark.asyncio
    async def test_concurrent_submit_creates_once(self, ctx, notifier):
        first, second = await asyncio.gather(
            ctx.properties.submit(submission()),
            ctx.properties.submit(submission()),
        )

        assert first is not None
        assert second is None
        assert len(ctx.read_model.properties) == 1
        assert notifier.titles().count("Success") == 1
        assert not ctx.properties.is_submitting

    @pytest.mark.asyncio
    async def test_validation_errors_block_submit(self, ctx, notifier):
        result = await ctx.properties.submit(submission(name="", form_overrides={"floors": 0}))

        assert result is None
        title, message, severity = notifier.messages[-1]
        assert title == "Validation Errors"
        assert message == "PG name is required, Number of floors must be at least 1"
        assert ctx.read_model.properties == []

    @pytest.mark.asyncio
    async def test_unknown_manager_saves_with_warning(self, ctx, notifier):
        prop = await ctx.properties.submit(submission(manager_id=str(uuid4())))

        assert prop.manager_id is None
        assert MANAGER_UNAVAILABLE in notifier.of(Severity.WARNING)

    @pytest.mark.asyncio
    async def test_room_generation_failure_keeps_property(self, ctx, notifier):
        clashing = [
            FloorAllocation(floor=1, rooms=[RoomTypeAllocation(room_type="Single", count=1)]),
            FloorAllocation(floor=1, rooms=[RoomTypeAllocation(room_type="Single", count=1)]),
        ]

        prop = await ctx.properties.submit(submission(floors=clashing))

        assert prop is not None
        warnings = notifier.of(Severity.WARNING)
        assert any("some rooms could not be generated" in w for w in warnings)
        assert [p.name for p in ctx.read_model.properties] == ["Sunrise PG"]
        assert ctx.read_model.rooms == []

    @pytest.mark.asyncio
    async def test_capacity_store_failure_still_saves_property(self, ctx, notifier, monkeypatch):
        prop = await ctx.properties.submit(submission())
        fail_update_statements(monkeypatch)

        updated = await ctx.properties.submit(submission(capacity=2), prop.id)

        assert updated is not None
        assert CAPACITY_NOT_APPLIED in notifier.of(Severity.WARNING)
        assert notifier.messages[-1] == ("Success", "Sunrise PG has been updated successfully.", Severity.SUCCESS)
        assert {r.capacity for r in ctx.read_model.rooms} == {1}

    @pytest.mark.asyncio
    async def test_duplicate_name_message(self, ctx, notifier):
        await ctx.properties.submit(submission())
        result = await ctx.properties.submit(submission())

        assert result is None
        assert notifier.messages[-1] == (
            "Error",
            "A PG with this name already exists. Please choose a different name.",
            Severity.ERROR,
        )

    @pytest.mark.asyncio
    async def test_delete(self, ctx, notifier):
        prop = await ctx.properties.submit(submission())

        assert await ctx.properties.delete(prop.id)
        assert ctx.read_model.properties == []
        assert ctx.read_model.rooms == []
        assert notifier.messages[-1][1] == "PG and all its rooms have been deleted successfully."


class TestRoomFormController:
    @pytest.mark.asyncio
    async def test_manager_cannot_touch_unassigned_pg(self, ctx, notifier):
        prop = await ctx.properties.submit(submission(name="Comfort Lodge"))
        await ctx.logout()
        await ctx.login("manager@hosteladmin.dev", "password")

        room = await ctx.rooms.save(RoomForm(number="201", type="Single", capacity=1, rent=0, pg_id=str(prop.id)))

        assert room is not None
        await ctx.logout()
        await ctx.login("accountant@hosteladmin.dev", "password")

        result = await ctx.rooms.save(RoomForm(number="202", type="Single", capacity=1, rent=0, pg_id=str(prop.id)))
        assert result is None
        assert notifier.messages[-1][1] == "You do not have permission to create room."


class TestAccountController:
    @pytest.mark.asyncio
    async def test_unknown_role_is_reported_and_not_stored(self, ctx, notifier):
        user = await ctx.accounts.create_user("root@example.com", "secret1", "Root", "superuser")

        assert user is None
        title, message, severity = notifier.messages[-1]
        assert (title, severity) == ("Validation Errors", Severity.ERROR)
        assert "Invalid role 'superuser'" in message
        assert [u.email for u in await ctx.session.get_users()] == []

    @pytest.mark.asyncio
    async def test_created_account_can_log_in(self, ctx, notifier):
        user = await ctx.accounts.create_user("priya@example.com", "secret1", "Priya", "manager")

        assert user.role == "manager"
        await ctx.logout()
        assert (await ctx.login("priya@example.com", "secret1")).email == "priya@example.com"


class TestAppContext:
    @pytest.mark.asyncio
    async def test_failed_login_notifies(self, session_factory, notifier, store):
        context = AppContext(session_factory=session_factory, notifier=notifier, store=store)

        assert await context.login("admin@hosteladmin.dev", "wrong") is None
        assert notifier.messages[-1] == ("Login failed", "Invalid email or password.", Severity.ERROR)

    @pytest.mark.asyncio
    async def test_failed_login_while_signed_in_ends_session(self, ctx, session_factory, notifier, store):
        await ctx.properties.submit(submission())

        assert await ctx.login("manager@hosteladmin.dev", "wrong") is None

        assert ctx.current_user is None
        assert ctx.read_model.properties == []
        restarted = AppContext(session_factory=session_factory, notifier=notifier, store=store)
        await restarted.start()
        assert restarted.current_user is None

    @pytest.mark.asyncio
    async def test_logout_clears_session_and_read_model(self, ctx, store):
        await ctx.properties.submit(submission())

        await ctx.logout()

        assert ctx.current_user is None
        assert ctx.read_model.properties == []
        assert store.read() is None

    @pytest.mark.asyncio
    async def test_start_restores_saved_session(self, ctx, session_factory, notifier, store):
        await ctx.properties.submit(submission())

        restarted = AppContext(session_factory=session_factory, notifier=notifier, store=store)
        await restarted.start()

        assert restarted.current_user.email == "admin@hosteladmin.dev"
        assert [p.name for p in restarted.read_model.properties] == ["Sunrise PG"]
