import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hostel_admin.lib.config import settings
from hostel_admin.lib.errors import (
    AuthenticationRequiredError,
    ConstraintViolationError,
    InvalidCredentialsError,
    PermissionDeniedError,
    ProfileNotFoundError,
)
from hostel_admin.lib.identity import IdentityProvider
from hostel_admin.lib.security import constant_time_equals, get_password_hash, verify_password
from hostel_admin.models.user import User
from hostel_admin.schemas.user import CurrentUser, UserRole
from hostel_admin.services.user_service import UserService, parse_role

logger = logging.getLogger(__name__)

# Built-in accounts that work without any store or provider
FALLBACK_ACCOUNTS = (
    {
        "id": "fallback-admin-1",
        "name": "Admin User",
        "email": "admin@hosteladmin.dev",
        "role": "admin",
        "assigned_pgs": [],
    },
    {
        "id": "fallback-manager-1",
        "name": "Manager User",
        "email": "manager@hosteladmin.dev",
        "role": "manager",
        "assigned_pgs": ["Sunrise PG", "Comfort Lodge"],
    },
    {
        "id": "fallback-accountant-1",
        "name": "Accountant User",
        "email": "accountant@hosteladmin.dev",
        "role": "accountant",
        "assigned_pgs": [],
    },
)


class AuthService:
    def __init__(self, db: AsyncSession, identity_provider: Optional[IdentityProvider] = None):
        self.db = db
        self.identity_provider = identity_provider
        self.users = UserService(db)

    def _match_fallback(self, email: str, password: str) -> Optional[CurrentUser]:
        if not settings.fallback_accounts_enabled:
            return None
        for account in FALLBACK_ACCOUNTS:
            if account["email"] == email and constant_time_equals(password, settings.fallback_password):
                return CurrentUser(
                    status="active",
                    last_login=datetime.utcnow().isoformat(),
                    **account,
                )
        return None

    def _check_account_password(self, user, password: str) -> bool:
        if user.password_hash:
            return verify_password(password, user.password_hash)
        # Accounts without their own secret share one default credential
        if settings.allow_shared_default_password:
            return constant_time_equals(password, settings.default_account_password)
        return False

    def _defers_to_provider(self, user) -> bool:
        # Provider-registered accounts keep their secret at the provider
        return self.identity_provider is not None and not user.password_hash

    async def authenticate(self, email: str, password: str) -> CurrentUser:
        """
        Resolve an identity from email and password.

        Tries, in order: built-in fallback accounts, store accounts, then the
        remote identity provider followed by a profile lookup. A store account
        without a local hash falls through to the provider when one is set.
        """
        email = email.strip().lower()

        fallback = self._match_fallback(email, password)
        if fallback:
            logger.info("Fallback account login for %s", email)
            return fallback

        user = await self.users.get_user_by_email(email)
        if user:
            if self._check_account_password(user, password):
                await self.users.touch_last_login(user)
                logger.info("Store account login for %s", email)
                return CurrentUser.from_account(user)
            if not self._defers_to_provider(user):
                logger.warning("Invalid password for %s", email)
                raise InvalidCredentialsError("Invalid password")

        if not self.identity_provider:
            raise InvalidCredentialsError("Invalid email or password")

        await self.identity_provider.sign_in(email, password)
        profile = await self.users.get_user_by_email(email)
        if not profile:
            logger.warning("Provider accepted %s but no profile exists", email)
            raise ProfileNotFoundError("User profile not found in database")

        await self.users.touch_last_login(profile)
        return CurrentUser.from_account(profile)

    async def register_user(
        self,
        email: str,
        password: str,
        name: str,
        role: str,
        assigned_pgs: Optional[List[str]] = None,
    ) -> User:
        """
        Create an account profile.

        With an identity provider the password lives there and the profile
        reuses the provider's user id; otherwise a bcrypt hash is stored.
        """
        role = parse_role(role)
        if await self.users.email_exists(email):
            raise ConstraintViolationError(
                f"A user with email '{email}' already exists", field="email"
            )

        user_id = None
        password_hash = None
        if self.identity_provider:
            user_id = UUID(await self.identity_provider.sign_up(
                email, password, metadata={"name": name, "role": role}
            ))
        else:
            password_hash = get_password_hash(password)

        return await self.users.create_user(
            name=name,
            email=email,
            role=role,
            assigned_pgs=assigned_pgs,
            user_id=user_id,
            password_hash=password_hash,
        )


class Permissions:
    """Role gate for mutations. Managers are scoped to their assigned PG names."""

    def __init__(self, user: Optional[CurrentUser]):
        self.user = user

    def _require_user(self, action: str) -> CurrentUser:
        if self.user is None:
            raise AuthenticationRequiredError(f"Authentication required to {action}")
        return self.user

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.role == UserRole.ADMIN

    def can_edit_property(self, property_name: str) -> bool:
        if self.user is None:
            return False
        if self.user.role == UserRole.ADMIN:
            return True
        return self.user.role == UserRole.MANAGER and property_name in self.user.assigned_pgs

    def require_admin(self, action: str) -> CurrentUser:
        user = self._require_user(action)
        if user.role != UserRole.ADMIN:
            raise PermissionDeniedError(f"Only administrators can {action}")
        return user

    def require_property_access(self, property_name: str, action: str) -> CurrentUser:
        user = self._require_user(action)
        if not self.can_edit_property(property_name):
            raise PermissionDeniedError(f"Not allowed to {action} for {property_name}")
        return user
