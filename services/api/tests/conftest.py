"""Pytest fixtures: a throwaway SQLite database per test and an ASGI client."""

import os

# Keep OTLP exporters out of the test process
os.environ.setdefault("TRACING_ENABLED", "false")

from datetime import datetime, timedelta
from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.database import Base, get_db
from app.main import app
from app.models import Like, Planet, StellarSystem, User

BASE_TIME = datetime(2025, 1, 1, 0, 0, 0)


class Seeder:
    """Writes users, systems, planets and likes straight into the test DB."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._users: set[str] = set()
        self._systems = 0

    async def user(self, user_id: str) -> str:
        if user_id not in self._users:
            self.session.add(User(user_id=user_id, username=f"name_{user_id}"))
            self._users.add(user_id)
            await self.session.flush()
        return user_id

    async def system(
        self,
        system_id: str,
        created_at: Optional[datetime] = None,
        owner_id: str = "owner",
        planets: int = 0,
    ) -> str:
        await self.user(owner_id)
        self._systems += 1
        created_at = created_at or BASE_TIME + timedelta(hours=self._systems)
        self.session.add(
            StellarSystem(
                id=system_id,
                title=f"System {system_id}",
                galaxy_id="gal_001",
                owner_id=owner_id,
                created_at=created_at,
                updated_at=created_at,
            )
        )
        for i in range(planets):
            self.session.add(Planet(id=f"{system_id}_p{i}", system_id=system_id, name=f"p{i}"))
        await self.session.flush()
        return system_id

    async def like(self, user_id: str, system_id: str, created_at: Optional[datetime] = None) -> None:
        await self.user(user_id)
        self.session.add(
            Like(user_id=user_id, system_id=system_id, created_at=created_at or BASE_TIME)
        )
        await self.session.flush()

    async def likes(self, system_id: str, count: int, created_at: Optional[datetime] = None, prefix: str = "u") -> None:
        for i in range(count):
            await self.like(f"{prefix}{i}", system_id, created_at)


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def _enforce_foreign_keys(dbapi_connection, connection_record):
        # SQLite ignores FOREIGN KEY clauses unless asked per connection
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seed(db_session):
    return Seeder(db_session)


@pytest_asyncio.fixture
async def client(db_session):
    async def _override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = _override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def base_time():
    return BASE_TIME
