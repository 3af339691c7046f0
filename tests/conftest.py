"""Test fixtures — a fresh in-memory database per test, seeded with two
restaurants and one user of every role.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own aiosqlite engine (StaticPool keeps the single
   in-memory connection alive) with the schema created from the models.
2. The app's get_db dependency is overridden to yield that test's session,
   so HTTP calls and direct repository calls see the same rows.
3. The engine is disposed after the test, so nothing leaks between tests.

MAITRE_* env vars must be set before any maitre import: the settings
singleton and the module-level engine are built at import time.
"""

import os

os.environ.setdefault("MAITRE_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("MAITRE_JWT_SECRET", "test-signing-secret-not-for-production")

from dataclasses import dataclass

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from maitre.auth.jwt import TokenConfig, TokenIssuer
from maitre.auth.password import hash_password
from maitre.auth.roles import Role
from maitre.db.engine import build_engine, build_session_factory, get_db
from maitre.db.models import Base, Restaurant, User
from maitre.db.repository import SqlUserRepository
from maitre.main import app

PASSWORD = "correct-horse-battery"
# Minimum bcrypt cost keeps the suite fast; verification works the same.
PASSWORD_HASH = hash_password(PASSWORD, rounds=4)


@dataclass
class Seed:
    bistro: Restaurant
    diner: Restaurant
    staff: User
    admin: User
    super_admin: User
    inactive: User
    diner_admin: User


@pytest_asyncio.fixture()
async def db_session():
    engine = build_engine("sqlite+aiosqlite://")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with build_session_factory(engine)() as session:
        try:
            yield session
        finally:
            await session.close()
    await engine.dispose()


@pytest_asyncio.fixture()
async def seed(db_session) -> Seed:
    bistro = Restaurant(name="Bistro Verde")
    diner = Restaurant(name="Night Owl Diner")

    def user(email: str, name: str, role: Role, restaurant: Restaurant, active: bool = True) -> User:
        return User(
            email=email,
            name=name,
            password_hash=PASSWORD_HASH,
            role=role,
            restaurant=restaurant,
            is_active=active,
        )

    seeded = Seed(
        bistro=bistro,
        diner=diner,
        staff=user("waiter@bistro.test", "Wendy Waiter", Role.STAFF, bistro),
        admin=user("owner@bistro.test", "Olga Owner", Role.ADMIN, bistro),
        super_admin=user("root@platform.test", "Pat Platform", Role.SUPER_ADMIN, bistro),
        inactive=user("former@bistro.test", "Fred Former", Role.ADMIN, bistro, active=False),
        diner_admin=user("owner@diner.test", "Dan Diner", Role.ADMIN, diner),
    )
    db_session.add_all(
        [
            bistro,
            diner,
            seeded.staff,
            seeded.admin,
            seeded.super_admin,
            seeded.inactive,
            seeded.diner_admin,
        ]
    )
    await db_session.commit()
    return seeded


@pytest.fixture()
def password() -> str:
    return PASSWORD


@pytest.fixture()
def repository(db_session) -> SqlUserRepository:
    return SqlUserRepository(db_session)


@pytest.fixture()
def token_config() -> TokenConfig:
    """The config the running app signs with."""
    return app.state.token_config


@pytest.fixture()
def issue_token(token_config):
    """Mint a token the app will accept, for a given user."""
    issuer = TokenIssuer(token_config)
    return issuer.issue


@pytest_asyncio.fixture()
async def client(db_session):
    """HTTP client against the real app, with get_db pointed at the test DB."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def api_client(client):
    """Client rooted at /api, the way the session client is configured."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test/api") as ac:
        yield ac
