"""
Session Service

Owns the signed-in identity for an embedded admin client: the
unauthenticated -> loading -> authenticated state machine, the durable local
slot that survives restarts, and the account operations exposed next to
login/logout.
"""
import logging
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import async_sessionmaker

from hostel_admin.lib.errors import AdminError
from hostel_admin.lib.identity import IdentityProvider
from hostel_admin.lib.session_store import LocalSessionStore
from hostel_admin.models.user import User
from hostel_admin.schemas.user import CurrentUser
from hostel_admin.services.auth_service import AuthService, Permissions
from hostel_admin.services.user_service import UserService

logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"


class SessionManager:
    def __init__(
        self,
        session_factory: async_sessionmaker,
        store: LocalSessionStore,
        identity_provider: Optional[IdentityProvider] = None,
    ):
        self.session_factory = session_factory
        self.store = store
        self.identity_provider = identity_provider
        self.state = AuthState.UNAUTHENTICATED
        self.current_user: Optional[CurrentUser] = None

    @property
    def is_authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED

    @property
    def permissions(self) -> Permissions:
        return Permissions(self.current_user)

    def _set_user(self, user: CurrentUser) -> None:
        self.current_user = user
        self.state = AuthState.AUTHENTICATED
        self.store.write(user.model_dump(mode="json"))

    def _reset(self) -> None:
        self.current_user = None
        self.state = AuthState.UNAUTHENTICATED

    def restore(self) -> Optional[CurrentUser]:
        """Restore the identity saved in the durable slot, if any."""
        stored = self.store.read()
        if not stored:
            self._reset()
            return None

        try:
            user = CurrentUser.model_validate(stored)
        except ValidationError:
            logger.warning("Stored session is not a valid identity; discarding it")
            self.store.clear()
            self._reset()
            return None

        logger.info("Restored session for %s", user.email)
        self.current_user = user
        self.state = AuthState.AUTHENTICATED
        return user

    async def login(self, email: str, password: str) -> CurrentUser:
        self.state = AuthState.LOADING
        logger.info("Attempting login for %s", email)
        try:
            async with self.session_factory() as db:
                user = await AuthService(db, self.identity_provider).authenticate(email, password)
        except Exception:
            # A failed attempt ends any previous session, on disk as well
            self.store.clear()
            self._reset()
            raise

        self._set_user(user)
        return user

    async def logout(self) -> None:
        logger.info("Logging out %s", self.current_user.email if self.current_user else "anonymous session")
        self.store.clear()
        self._reset()
        if self.identity_provider:
            try:
                await self.identity_provider.sign_out()
            except AdminError as e:
                logger.error("Identity provider sign-out failed: %s", e)

    async def get_users(self) -> List[User]:
        async with self.session_factory() as db:
            users, _ = await UserService(db).list_users()
        return users

    async def create_user(
        self,
        email: str,
        password: str,
        name: str,
        role: str,
        assigned_pgs: Optional[List[str]] = None,
    ) -> User:
        self.permissions.require_admin("create users")

        async with self.session_factory() as db:
            user = await AuthService(db, self.identity_provider).register_user(
                email, password, name, role, assigned_pgs
            )
        logger.info("User %s created", user.email)
        return user

    async def update_user(self, user_id: UUID, **fields) -> User:
        self.permissions.require_admin("update users")

        async with self.session_factory() as db:
            user = await UserService(db).update_user(user_id, fields)

        if self.current_user and self.current_user.id == str(user.id):
            self._set_user(CurrentUser.from_account(user))
        return user

    async def delete_user(self, user_id: UUID) -> None:
        self.permissions.require_admin("delete users")

        async with self.session_factory() as db:
            await UserService(db).delete_user(user_id)
        logger.info("User %s deleted", user_id)

