"""
Application context for an embedded admin client.

Owns the session manager, the read-model and the notifier so UI code gets
them from one object it was handed, not from module globals.
"""
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from hostel_admin.lib.config import settings
from hostel_admin.lib.database import AsyncSessionLocal
from hostel_admin.lib.errors import describe_error
from hostel_admin.lib.identity import IdentityProvider, get_identity_provider
from hostel_admin.lib.notifications import LoggingNotifier, Notifier, Severity
from hostel_admin.lib.session_store import LocalSessionStore
from hostel_admin.schemas.user import CurrentUser
from hostel_admin.services.controllers import (
    AccountController,
    REPORTABLE_ERRORS,
    PropertyFormController,
    RoomFormController,
)
from hostel_admin.services.reconciliation_service import ReadModel, ReconciliationService
from hostel_admin.services.session_service import SessionManager

logger = logging.getLogger(__name__)


class AppContext:
    def __init__(
        self,
        session_factory: async_sessionmaker = AsyncSessionLocal,
        notifier: Optional[Notifier] = None,
        store: Optional[LocalSessionStore] = None,
        identity_provider: Optional[IdentityProvider] = None,
    ):
        self.session_factory = session_factory
        self.notifier = notifier or LoggingNotifier()
        if identity_provider is None:
            identity_provider = get_identity_provider()
        self.session = SessionManager(
            session_factory,
            store or LocalSessionStore(settings.session_file, settings.session_key),
            identity_provider,
        )
        self.reconciler = ReconciliationService(session_factory)

        self.properties = PropertyFormController(self)
        self.rooms = RoomFormController(self)
        self.accounts = AccountController(self)

    @property
    def read_model(self) -> ReadModel:
        return self.reconciler.read_model

    @property
    def current_user(self) -> Optional[CurrentUser]:
        return self.session.current_user

    async def start(self) -> None:
        """Restore a saved session and load data for it."""
        if self.session.restore():
            await self.reconciler.refresh()

    async def login(self, email: str, password: str) -> Optional[CurrentUser]:
        try:
            user = await self.session.login(email, password)
        except REPORTABLE_ERRORS as e:
            logger.error("Login error: %s", e)
            self.reconciler.clear()
            self.notifier.notify("Login failed", describe_error(e, "log in"), Severity.ERROR)
            return None

        await self.reconciler.refresh()
        return user

    async def logout(self) -> None:
        """Clear the session slot, the identity and the read-model."""
        await self.session.logout()
        self.reconciler.clear()
