import os
from datetime import date, timedelta
from decimal import Decimal

# до импорта app: настройки читаются один раз при импорте
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import app.models  # noqa: F401
from app.core.security import create_profile_token
from app.db.base import Base
from app.db.session import get_session
from app.main import app as fastapi_app
from app.models.drink_brand import DrinkCategory
from app.models.profile import Profile, UserRole
from app.services import catalog as catalog_service
from app.services import profiles as profile_service
from app.services import spots as spot_service


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'brocode.db'}",
        poolclass=NullPool,
    )
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_session():
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_session] = override_get_session
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def make_profile(session):
    counter = {"n": 0}

    async def make(
        username: str | None = None,
        role: UserRole = UserRole.user,
        password: str = "StrongPass123!",
    ) -> Profile:
        counter["n"] += 1
        n = counter["n"]
        return await profile_service.create_profile(
            session,
            name=f"Bro {n}",
            username=username or f"bro{n}",
            phone=f"+7900000{n:04d}",
            password=password,
            role=role,
        )

    return make


@pytest.fixture
async def admin(make_profile):
    return await make_profile(username="boss", role=UserRole.admin)


@pytest.fixture
async def user(make_profile):
    return await make_profile(username="vasya")


@pytest.fixture
def make_spot(session, admin):
    async def make(when: date | None = None, budget: str = "500", location: str = "Garage"):
        return await spot_service.create_spot(
            session,
            admin,
            {
                "date": when or date.today() + timedelta(days=3),
                "timing": "21:00",
                "budget": Decimal(budget),
                "location": location,
            },
        )

    return make


@pytest.fixture
async def brand(session):
    return await catalog_service.create_drink_brand(
        session,
        {
            "name": "Old Monk",
            "category": DrinkCategory.rum,
            "base_price": Decimal("100.00"),
        },
    )


@pytest.fixture
def auth_headers():
    def make(profile: Profile) -> dict[str, str]:
        token = create_profile_token(profile.id, profile.role.value)
        return {"Authorization": f"Bearer {token}"}

    return make
