from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from hostel_admin.lib.config import settings
from hostel_admin.lib.errors import translate_store_error


class Base(DeclarativeBase):
    pass


def create_engine(url: str, **kwargs):
    """Create an async engine; SQLite connections get foreign key enforcement."""
    engine = create_async_engine(url, echo=False, future=True, **kwargs)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def create_session_factory(bind) -> async_sessionmaker:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
    )


engine = create_engine(settings.database_url)

AsyncSessionLocal = create_session_factory(engine)


async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def commit_or_raise(session: AsyncSession, entity: str) -> None:
    """Commit, turning store failures into typed admin errors."""
    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        raise translate_store_error(e, entity) from e
