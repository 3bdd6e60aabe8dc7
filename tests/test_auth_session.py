import json
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import httpx
import pytest

from hostel_admin.lib.errors import (
    AuthenticationRequiredError,
    IdentityProviderError,
    InvalidCredentialsError,
    PermissionDeniedError,
    ProfileNotFoundError,
)
from hostel_admin.lib.identity import IdentityProvider
from hostel_admin.lib.security import get_password_hash
from hostel_admin.schemas.user import UserRole
from hostel_admin.services.auth_service import Permissions
from hostel_admin.services.session_service import AuthState, SessionManager
from hostel_admin.services.user_service import UserService

PROVIDER_USER_ID = "6f1c9a52-3b7d-4e0a-9b8e-2f4d5c6a7b80"


def provider_transport(calls, accept=True):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append((request.method, request.url.path, request.headers.get("authorization")))
        if request.url.path.endswith("/token"):
            if not accept:
                return httpx.Response(400, json={"error": "invalid_grant"})
            body = json.loads(request.content)
            return httpx.Response(200, json={
                "access_token": "provider-token",
                "user": {"id": PROVIDER_USER_ID, "email": body["email"]},
            })
        if request.url.path.endswith("/signup"):
            return httpx.Response(200, json={"user": {"id": PROVIDER_USER_ID}})
        if request.url.path.endswith("/logout"):
            return httpx.Response(204)
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def make_provider(calls, accept=True):
    return IdentityProvider(
        "http://idp.test/auth/v1", api_key="anon", transport=provider_transport(calls, accept)
    )


class TestLogin:
    @pytest.mark.asyncio
    async def test_fallback_account(self, session_factory, store):
        session = SessionManager(session_factory, store)

        user = await session.login("Admin@HostelAdmin.dev", "password")

        assert session.state == AuthState.AUTHENTICATED
        assert user.role == UserRole.ADMIN
        assert store.read()["email"] == "admin@hosteladmin.dev"

    @pytest.mark.asyncio
    async def test_wrong_password_for_known_account(self, session_factory, db, store):
        await UserService(db).create_user(
            name="Priya", email="priya@example.com", role="manager",
            password_hash=get_password_hash("secret1"),
        )
        session = SessionManager(session_factory, store)

        with pytest.raises(InvalidCredentialsError):
            await session.login("priya@example.com", "wrong")

        assert session.state == AuthState.UNAUTHENTICATED
        assert session.current_user is None
        assert store.read() is None

    @pytest.mark.asyncio
    async def test_store_account_with_hash(self, session_factory, db, store):
        await UserService(db).create_user(
            name="Priya", email="priya@example.com", role="manager",
            assigned_pgs=["Sunrise PG"], password_hash=get_password_hash("secret1"),
        )
        session = SessionManager(session_factory, store)

        user = await session.login("priya@example.com", "secret1")

        assert user.role == UserRole.MANAGER
        assert user.assigned_pgs == ["Sunrise PG"]
        assert user.last_login is not None

    @pytest.mark.asyncio
    async def test_store_account_with_shared_credential(self, session_factory, db, store):
        await UserService(db).create_user(name="Ravi", email="ravi@example.com", role="viewer")
        session = SessionManager(session_factory, store)

        user = await session.login("ravi@example.com", "password")

        assert user.email == "ravi@example.com"

    @pytest.mark.asyncio
    async def test_unknown_account_without_provider(self, session_factory, store):
        session = SessionManager(session_factory, store)

        with pytest.raises(InvalidCredentialsError):
            await session.login("nobody@example.com", "password")


class TestIdentityProvider:
    @pytest.mark.asyncio
    async def test_provider_sign_in_then_profile(self, session_factory, db, store):
        await UserService(db).create_user(
            name="Anita", email="anita@example.com", role="accountant", user_id=UUID(PROVIDER_USER_ID)
        )
        calls = []
        session = SessionManager(session_factory, store, make_provider(calls))

        user = await session.login("anita@example.com", "provider-secret")

        assert user.id == PROVIDER_USER_ID
        assert calls[0][:2] == ("POST", "/auth/v1/token")

        await session.logout()
        assert calls[-1] == ("POST", "/auth/v1/logout", "Bearer provider-token")

    @pytest.mark.asyncio
    async def test_provider_accepts_but_no_profile(self, session_factory, store):
        session = SessionManager(session_factory, store, make_provider([]))

        with pytest.raises(ProfileNotFoundError):
            await session.login("ghost@example.com", "provider-secret")
        assert session.state == AuthState.UNAUTHENTICATED

    @pytest.mark.asyncio
    async def test_provider_rejects(self, session_factory, store):
        session = SessionManager(session_factory, store, make_provider([], accept=False))

        with pytest.raises(InvalidCredentialsError):
            await session.login("ghost@example.com", "nope")

    @pytest.mark.asyncio
    async def test_create_user_registers_with_provider(self, session_factory, store):
        calls = []
        session = SessionManager(session_factory, store, make_provider(calls))
        await session.login("admin@hosteladmin.dev", "password")

        user = await session.create_user("new@example.com", "secret1", "New User", "admin", ["Sunrise PG"])

        assert str(user.id) == PROVIDER_USER_ID
        assert user.password_hash is None
        assert user.assigned_pgs == []
        assert any(path.endswith("/signup") for _, path, _ in calls)


class TestSessionLifecycle:
    @pytest.mark.asyncio
    async def test_restore_from_slot(self, session_factory, store):
        await SessionManager(session_factory, store).login("manager@hosteladmin.dev", "password")

        restored = SessionManager(session_factory, store).restore()

        assert restored is not None
        assert restored.role == UserRole.MANAGER
        assert restored.assigned_pgs == ["Sunrise PG", "Comfort Lodge"]

    def test_corrupt_slot_is_discarded(self, session_factory, store):
        store.path.write_text(json.dumps({"current-user": "{not json"}), encoding="utf-8")
        session = SessionManager(session_factory, store)

        assert session.restore() is None
        assert session.state == AuthState.UNAUTHENTICATED

    @pytest.mark.asyncio
    async def test_logout_clears_slot(self, session_factory, store):
        session = SessionManager(session_factory, store)
        await session.login("admin@hosteladmin.dev", "password")

        await session.logout()

        assert session.state == AuthState.UNAUTHENTICATED
        assert store.read() is None
        assert SessionManager(session_factory, store).restore() is None

    @pytest.mark.asyncio
    async def test_failed_login_ends_previous_session(self, session_factory, store):
        session = SessionManager(session_factory, store)
        await session.login("admin@hosteladmin.dev", "password")

        with pytest.raises(InvalidCredentialsError):
            await session.login("manager@hosteladmin.dev", "wrong")

        assert session.state == AuthState.UNAUTHENTICATED
        assert session.current_user is None
        assert store.read() is None
        assert SessionManager(session_factory, store).restore() is None

    @pytest.mark.asyncio
    async def test_logout_survives_provider_failure(self, session_factory, store):
        provider = AsyncMock()
        provider.sign_out.side_effect = IdentityProviderError("sign-out failed with status 503")
        session = SessionManager(session_factory, store, provider)
        await session.login("admin@hosteladmin.dev", "password")

        await session.logout()

        provider.sign_out.assert_awaited_once()
        assert session.state == AuthState.UNAUTHENTICATED
        assert store.read() is None

    @pytest.mark.asyncio
    async def test_account_operations_need_admin(self, session_factory, store):
        session = SessionManager(session_factory, store)

        with pytest.raises(AuthenticationRequiredError):
            await session.delete_user(uuid4())

        await session.login("accountant@hosteladmin.dev", "password")
        with pytest.raises(PermissionDeniedError):
            await session.create_user("x@example.com", "secret1", "X", "viewer")

    @pytest.mark.asyncio
    async def test_update_refreshes_current_identity(self, session_factory, db, store):
        admin = await UserService(db).create_user(
            name="Root", email="root@example.com", role="admin", password_hash=get_password_hash("secret1")
        )
        session = SessionManager(session_factory, store)
        await session.login("root@example.com", "secret1")

        await session.update_user(admin.id, name="Root Admin")

        assert session.current_user.name == "Root Admin"
        assert store.read()["name"] == "Root Admin"


def test_manager_permissions_are_scoped(manager_user):
    permissions = Permissions(manager_user)

    assert permissions.can_edit_property("Sunrise PG")
    assert not permissions.can_edit_property("Comfort Lodge")
    with pytest.raises(PermissionDeniedError):
        permissions.require_admin("create PGs")
    with pytest.raises(PermissionDeniedError):
        permissions.require_property_access("Comfort Lodge", "update PGs")
