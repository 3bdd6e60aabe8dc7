from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError

from hostel_admin.lib.identity import IdentityProvider, get_identity_provider
from hostel_admin.lib.security import create_access_token, decode_access_token
from hostel_admin.schemas.user import CurrentUser, UserRole
from hostel_admin.services.auth_service import Permissions

security = HTTPBearer(auto_error=False)


def issue_token(user: CurrentUser) -> str:
    """Access token carrying an identity snapshot of the signed-in account."""
    return create_access_token({
        "sub": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role.value,
        "status": user.status,
        "assigned_pgs": user.assigned_pgs,
    })


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise unauthorized

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise unauthorized

    try:
        return CurrentUser(
            id=payload["sub"],
            email=payload["email"],
            name=payload["name"],
            role=payload["role"],
            status=payload.get("status", "active"),
            assigned_pgs=payload.get("assigned_pgs", []),
        )
    except (KeyError, ValidationError):
        raise unauthorized


async def get_permissions(current_user: CurrentUser = Depends(get_current_user)) -> Permissions:
    return Permissions(current_user)


async def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if current_user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user


def get_provider() -> Optional[IdentityProvider]:
    return get_identity_provider()
