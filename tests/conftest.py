"""
Venue Admin — Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the whole suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite,
       StaticPool so all sessions share the one connection) with the full
       schema created from Base.metadata. API tests talk to the real app
       through httpx's ASGITransport with `get_db_session` overridden to
       use that database, and authenticate with JWTs signed by the test
       secret.

Fixture Hierarchy:
    engine → session_factory → db_session
                            └→ seed (cities, venues, grounds, sports, menus)
                            └→ client (AsyncClient against the app)
    make_token / auth: bearer tokens for each requester tier
"""

import os
import tempfile

# Settings are read at import time; configure them BEFORE importing venue_admin
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-venue-admin-suite"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="venue_admin_storage_")
os.environ["REPORT_DIR"] = tempfile.mkdtemp(prefix="venue_admin_reports_")
os.environ["LOG_LEVEL"] = "WARNING"

from types import SimpleNamespace
from typing import AsyncGenerator

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from venue_admin.config import settings
from venue_admin.database import Base, get_db_session
import venue_admin.models  # noqa: F401
from venue_admin.models.reference import City, Ground, Menu, Sport
from venue_admin.models.venue import Venue
from venue_admin.services.permissions import Menus


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seed(session_factory):
    """
    Reference data shared by most tests.

    north (city)
    ├── arena (venue) ── arena_pitch, arena_court (grounds)
    └── dome (venue)  ── dome_pitch
    south (city)
    └── field (venue) ── field_pitch

    Written through its own session, so tests get detached objects whose
    column attributes stay readable.
    """
    async with session_factory() as db_session:
        return await _seed(db_session)


async def _seed(db_session: AsyncSession) -> SimpleNamespace:
    north = City(name="North")
    south = City(name="South")
    closed_city = City(name="Closed", is_active=False)
    db_session.add_all([north, south, closed_city])
    await db_session.flush()

    football = Sport(name="Football", icon="football.svg")
    cricket = Sport(name="Cricket", icon="cricket.svg")
    db_session.add_all([football, cricket])

    arena = Venue(name="Arena Stadium", address="1 Arena Road", city_id=north.id)
    dome = Venue(name="Dome", address="2 Dome Street", city_id=north.id)
    field = Venue(name="Field House", address="3 Field Lane", city_id=south.id)
    db_session.add_all([arena, dome, field])
    await db_session.flush()

    arena_pitch = Ground(name="Arena Pitch", city_id=north.id, venue_id=arena.id)
    arena_court = Ground(name="Arena Court", city_id=north.id, venue_id=arena.id)
    dome_pitch = Ground(name="Dome Pitch", city_id=north.id, venue_id=dome.id)
    field_pitch = Ground(name="Field Pitch", city_id=south.id, venue_id=field.id)
    db_session.add_all([arena_pitch, arena_court, dome_pitch, field_pitch])

    menus = {menu: Menu(name=menu.value) for menu in (
        Menus.ROLES, Menus.VENUES, Menus.SLOT_TIMES, Menus.EXPENSES,
    )}
    db_session.add_all(menus.values())

    await db_session.commit()

    return SimpleNamespace(
        north=north,
        south=south,
        closed_city=closed_city,
        football=football,
        cricket=cricket,
        arena=arena,
        dome=dome,
        field=field,
        arena_pitch=arena_pitch,
        arena_court=arena_court,
        dome_pitch=dome_pitch,
        field_pitch=field_pitch,
        menus=menus,
    )


# ══════════════════════════════════════════════════════════════════════════
# Authentication
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_token():
    """Signs claims with the test secret, the way the login service would."""

    def _make(**claims) -> str:
        claims.setdefault("id", "user-1")
        return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

    return _make


@pytest.fixture
def auth(make_token, seed):
    """Ready-made Authorization headers for each requester tier."""

    def header(**claims):
        return {"Authorization": f"Bearer {make_token(**claims)}"}

    return SimpleNamespace(
        super_admin=header(is_superadmin=True),
        admin=header(is_admin=True, city={"_id": str(seed.north.id)}),
        sub_admin=header(
            is_subadmin=True,
            city={"_id": str(seed.north.id)},
            venue=[str(seed.arena.id)],
            ground=[str(seed.arena_pitch.id)],
        ),
        header=header,
    )


# ══════════════════════════════════════════════════════════════════════════
# API Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def client(session_factory):
    """
    HTTPX AsyncClient against the app, backed by the test database.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
    """
    from venue_admin.main import app

    async def override_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
