"""
Client for a GoTrue-compatible identity provider.

Only the three calls the admin needs are covered: password sign-in,
sign-up and sign-out.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from hostel_admin.lib.config import settings
from hostel_admin.lib.errors import IdentityProviderError, InvalidCredentialsError

logger = logging.getLogger(__name__)


@dataclass
class ProviderSession:
    user_id: str
    email: str
    access_token: str


class IdentityProvider:
    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport
        self.session: Optional[ProviderSession] = None

    def _client(self) -> httpx.AsyncClient:
        headers = {"apikey": self.api_key} if self.api_key else {}
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=self.timeout,
            transport=self.transport,
        )

    async def sign_in(self, email: str, password: str) -> ProviderSession:
        """Exchange email and password for a provider session."""
        try:
            async with self._client() as client:
                resp = await client.post(
                    "/token",
                    params={"grant_type": "password"},
                    json={"email": email, "password": password},
                )
        except httpx.HTTPError as e:
            raise IdentityProviderError(str(e)) from e

        if resp.status_code in (400, 401, 403):
            raise InvalidCredentialsError("Invalid email or password")
        if resp.status_code >= 400:
            raise IdentityProviderError(f"sign-in failed with status {resp.status_code}")

        body = resp.json()
        user = body.get("user") or {}
        self.session = ProviderSession(
            user_id=str(user.get("id", "")),
            email=user.get("email", email),
            access_token=body.get("access_token", ""),
        )
        return self.session

    async def sign_up(self, email: str, password: str, metadata: Optional[dict] = None) -> str:
        """Register an identity and return the provider's user id."""
        try:
            async with self._client() as client:
                resp = await client.post(
                    "/signup",
                    json={"email": email, "password": password, "data": metadata or {}},
                )
        except httpx.HTTPError as e:
            raise IdentityProviderError(str(e)) from e

        if resp.status_code >= 400:
            raise IdentityProviderError(f"sign-up failed with status {resp.status_code}")

        body = resp.json()
        user = body.get("user") or body
        return str(user["id"])

    async def sign_out(self) -> None:
        if not self.session:
            return
        token = self.session.access_token
        self.session = None
        try:
            async with self._client() as client:
                resp = await client.post("/logout", headers={"Authorization": f"Bearer {token}"})
        except httpx.HTTPError as e:
            raise IdentityProviderError(str(e)) from e
        if resp.status_code >= 400:
            raise IdentityProviderError(f"sign-out failed with status {resp.status_code}")


def get_identity_provider() -> Optional[IdentityProvider]:
    if not settings.use_identity_provider:
        return None
    return IdentityProvider(
        settings.identity_provider_url,
        api_key=settings.identity_provider_api_key,
        timeout=settings.identity_provider_timeout,
    )
