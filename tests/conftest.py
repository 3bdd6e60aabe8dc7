import os

# Point settings at SQLite before any application module reads them
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["IDENTITY_PROVIDER_URL"] = ""
os.environ["FALLBACK_PASSWORD"] = "password"

import pytest
import pytest_asyncio

import hostel_admin.models  # noqa: F401  registers tables on Base.metadata
from hostel_admin.lib.database import Base, create_engine, create_session_factory
from hostel_admin.lib.notifications import Severity
from hostel_admin.lib.session_store import LocalSessionStore
from hostel_admin.schemas.user import CurrentUser
from hostel_admin.services.auth_service import Permissions


class RecordingNotifier:
    """Notifier that keeps every notification for assertions."""

    def __init__(self):
        self.messages = []

    def notify(self, title, message, severity=Severity.INFO):
        self.messages.append((title, message, severity))

    def titles(self):
        return [title for title, _, _ in self.messages]

    def of(self, severity):
        return [message for _, message, s in self.messages if s == severity]


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def store(tmp_path):
    return LocalSessionStore(tmp_path / "session.json", "current-user")


@pytest.fixture
def admin_user():
    return CurrentUser(
        id="fallback-admin-1",
        name="Admin User",
        email="admin@hosteladmin.dev",
        role="admin",
    )


@pytest.fixture
def manager_user():
    return CurrentUser(
        id="fallback-manager-1",
        name="Manager User",
        email="manager@hosteladmin.dev",
        role="manager",
        assigned_pgs=["Sunrise PG"],
    )


@pytest.fixture
def admin_permissions(admin_user):
    return Permissions(admin_user)


@pytest.fixture
def manager_permissions(manager_user):
    return Permissions(manager_user)
