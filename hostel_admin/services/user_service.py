import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_admin.lib.database import commit_or_raise
from hostel_admin.lib.errors import ConstraintViolationError, FormValidationError, NotFoundError
from hostel_admin.models.property import Property
from hostel_admin.models.user import User
from hostel_admin.schemas.user import UserRole

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def parse_role(role) -> str:
    """Return the stored value of a known role, rejecting anything else."""
    try:
        return UserRole(role).value
    except ValueError:
        allowed = ", ".join(r.value for r in UserRole)
        raise FormValidationError([f"Invalid role '{role}'. Choose one of: {allowed}"])


def _assignments_for(role: str, assigned_pgs: Optional[Sequence[str]]) -> List[str]:
    # Admins have implicit access to every property
    if role == "admin":
        return []
    names = []
    for name in assigned_pgs or []:
        if name not in names:
            names.append(name)
    return names


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_users(self) -> Tuple[List[User], int]:
        """List all accounts ordered by name."""
        result = await self.db.execute(select(User).order_by(User.name))
        users = list(result.scalars().all())
        return users, len(users)

    async def list_managers(self) -> List[User]:
        result = await self.db.execute(
            select(User).where(User.role == "manager").order_by(User.name)
        )
        return list(result.scalars().all())

    async def get_user(self, user_id: UUID) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_or_404(self, user_id: UUID) -> User:
        user = await self.get_user(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.email == _normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def email_exists(self, email: str, exclude_id: Optional[UUID] = None) -> bool:
        query = select(func.count(User.id)).where(User.email == _normalize_email(email))
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await self.db.execute(query)
        return result.scalar_one() > 0

    async def create_user(
        self,
        name: str,
        email: str,
        role: str,
        assigned_pgs: Optional[Sequence[str]] = None,
        status: str = "active",
        user_id: Optional[UUID] = None,
        password_hash: Optional[str] = None,
    ) -> User:
        role = parse_role(role)
        if await self.email_exists(email):
            raise ConstraintViolationError(
                f"A user with email '{email}' already exists", field="email"
            )

        user = User(
            name=name.strip(),
            email=_normalize_email(email),
            role=role,
            status=status,
            assigned_pgs=_assignments_for(role, assigned_pgs),
            password_hash=password_hash,
            last_login=datetime.utcnow(),
        )
        if user_id is not None:
            user.id = user_id

        self.db.add(user)
        await commit_or_raise(self.db, "user")
        await self.db.refresh(user)

        logger.info("Created %s account %s", user.role, user.email)
        return user

    async def update_user(self, user_id: UUID, fields: Dict[str, Any]) -> User:
        user = await self.get_user_or_404(user_id)
        fields = dict(fields)

        if fields.get("email"):
            fields["email"] = _normalize_email(fields["email"])
            if fields["email"] != user.email and await self.email_exists(
                fields["email"], exclude_id=user.id
            ):
                raise ConstraintViolationError(
                    f"A user with email '{fields['email']}' already exists", field="email"
                )

        if "role" in fields:
            fields["role"] = parse_role(fields["role"])
        role = fields.get("role", user.role)
        if "assigned_pgs" in fields or role != user.role:
            fields["assigned_pgs"] = _assignments_for(
                role, fields.get("assigned_pgs", user.assigned_pgs)
            )

        for field, value in fields.items():
            setattr(user, field, value)

        await commit_or_raise(self.db, "user")
        await self.db.refresh(user)
        return user

    async def delete_user(self, user_id: UUID) -> None:
        """Delete an account; properties it managed lose their manager."""
        user = await self.get_user_or_404(user_id)

        await self.db.execute(
            update(Property)
            .where(Property.manager_id == user.id)
            .values(manager_id=None, manager=None)
            .execution_options(synchronize_session="fetch")
        )
        await self.db.delete(user)
        await commit_or_raise(self.db, "user")

    async def touch_last_login(self, user: User) -> None:
        user.last_login = datetime.utcnow()
        await self.db.commit()

    async def assign_property(self, user_id: UUID, property_name: str) -> User:
        """Add a property name to the account's assignments; repeated adds are no-ops."""
        user = await self.get_user_or_404(user_id)
        current = list(user.assigned_pgs or [])

        if user.role == "admin" or property_name in current:
            return user

        user.assigned_pgs = current + [property_name]
        await commit_or_raise(self.db, "user")
        await self.db.refresh(user)
        return user

    async def remove_property(self, user_id: UUID, property_name: str) -> User:
        """Drop a property name from the account's assignments if present."""
        user = await self.get_user_or_404(user_id)
        current = list(user.assigned_pgs or [])

        if property_name not in current:
            return user

        user.assigned_pgs = [name for name in current if name != property_name]
        await commit_or_raise(self.db, "user")
        await self.db.refresh(user)
        return user
