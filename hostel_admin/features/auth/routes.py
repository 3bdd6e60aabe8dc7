from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_admin.lib.database import get_db
from hostel_admin.lib.deps import get_current_user, get_provider, issue_token
from hostel_admin.lib.identity import IdentityProvider
from hostel_admin.schemas.auth import LoginRequest, LoginResponse
from hostel_admin.schemas.user import CurrentUser
from hostel_admin.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
    provider: Optional[IdentityProvider] = Depends(get_provider),
):
    """
    Authenticate with email and password.
    Fallback accounts are tried first, then store accounts, then the
    identity provider when one is configured.
    """
    service = AuthService(db, provider)
    user = await service.authenticate(request.email, request.password)

    return LoginResponse(access_token=issue_token(user), user=user)


@router.post("/logout")
async def logout(current_user: CurrentUser = Depends(get_current_user)):
    """
    Tokens are stateless; the client drops its copy.
    """
    return {"message": "Successfully logged out"}


@router.get("/me", response_model=CurrentUser)
async def get_me(current_user: CurrentUser = Depends(get_current_user)):
    return current_user
