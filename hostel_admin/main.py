import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hostel_admin.lib.config import settings
from hostel_admin.lib.errors import (
    AdminError,
    AuthenticationRequiredError,
    ConstraintViolationError,
    FormValidationError,
    IdentityProviderError,
    InvalidCredentialsError,
    InvalidReferenceError,
    NotFoundError,
    PermissionDeniedError,
    ProfileNotFoundError,
    StoreError,
)
from hostel_admin.lib.logging import configure_logging
from hostel_admin.features.health.routes import router as health_router
from hostel_admin.features.auth.routes import router as auth_router
from hostel_admin.features.properties.routes import router as properties_router
from hostel_admin.features.rooms.routes import router as rooms_router
from hostel_admin.features.users.routes import router as users_router
from hostel_admin.features.overview.routes import router as overview_router

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Hostel Admin API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix="/api", tags=["Health"])
app.include_router(auth_router, prefix="/api", tags=["Authentication"])
app.include_router(properties_router, prefix="/api", tags=["Properties"])
app.include_router(rooms_router, prefix="/api", tags=["Rooms"])
app.include_router(users_router, prefix="/api", tags=["Users"])
app.include_router(overview_router, prefix="/api", tags=["Overview"])

# Most specific first; lookup stops at the first isinstance match
_STATUS_CODES = (
    (FormValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (ConstraintViolationError, status.HTTP_409_CONFLICT),
    (InvalidReferenceError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidCredentialsError, status.HTTP_401_UNAUTHORIZED),
    (ProfileNotFoundError, status.HTTP_401_UNAUTHORIZED),
    (AuthenticationRequiredError, status.HTTP_401_UNAUTHORIZED),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (IdentityProviderError, status.HTTP_502_BAD_GATEWAY),
    (StoreError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for(exc: AdminError) -> int:
    for cls, code in _STATUS_CODES:
        if isinstance(exc, cls):
            return code
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(AdminError)
async def admin_error_handler(request: Request, exc: AdminError):
    code = status_for(exc)
    logger.warning("%s %s failed with %s: %s", request.method, request.url.path, type(exc).__name__, exc)

    content = {"detail": str(exc)}
    if isinstance(exc, FormValidationError):
        content["errors"] = exc.errors
    field = getattr(exc, "field", None)
    if field:
        content["field"] = field
    return JSONResponse(status_code=code, content=content)


@app.get("/")
async def root():
    return {"message": "Hostel Admin API", "docs": "/docs"}
