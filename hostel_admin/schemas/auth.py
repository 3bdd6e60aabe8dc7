from pydantic import BaseModel

from hostel_admin.schemas.user import CurrentUser


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: CurrentUser
