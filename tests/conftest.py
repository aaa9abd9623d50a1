import os
from typing import AsyncGenerator, Generator, List

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.pop("DISCORD_WEBHOOK_URL", None)

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.affiliates.models import Affiliate
from app.affiliates.notifier import get_notifier
from app.db.session import create_tables, get_db
from app.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class RecordingNotifier:
    """Stands in for DiscordNotifier; records affiliates instead of posting."""

    def __init__(self, fail: bool = False) -> None:
        self.sent: List[Affiliate] = []
        self.fail = fail

    async def notify_affiliate_created(self, affiliate: Affiliate) -> bool:
        self.sent.append(affiliate)
        return not self.fail


@pytest.fixture()
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite shared by every connection of one test."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await create_tables(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture()
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for a test and override FastAPI dependency."""
    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.pop(get_db, None)


@pytest.fixture()
def notifier() -> Generator[RecordingNotifier, None, None]:
    recording = RecordingNotifier()
    app.dependency_overrides[get_notifier] = lambda: recording
    yield recording
    app.dependency_overrides.pop(get_notifier, None)


@pytest.fixture()
async def client(db_session: AsyncSession, notifier: RecordingNotifier) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
