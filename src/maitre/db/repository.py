"""User repository — the auth core's only window onto stored users.

Learn: the core depends on the UserRepository protocol, not on SQL.
SqlUserRepository is the production implementation; tests and other
storage backends just need the same four coroutines. Lookups always
join the user's restaurant so callers never trigger a lazy load on an
async session.
"""

import uuid
from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from maitre.db.models import Restaurant, User


class UserRepository(Protocol):
    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]: ...

    async def find_by_email(self, email: str) -> Optional[User]: ...

    async def find_restaurant(self, restaurant_id: uuid.UUID) -> Optional[Restaurant]: ...

    async def list_restaurants(self) -> list[Restaurant]: ...


class SqlUserRepository:
    """Read-only user/restaurant lookups over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        q = select(User).options(selectinload(User.restaurant)).where(User.id == user_id)
        result = await self.db.execute(q)
        return result.scalars().first()

    async def find_by_email(self, email: str) -> Optional[User]:
        """Exact, case-sensitive match on the stored email."""
        q = select(User).options(selectinload(User.restaurant)).where(User.email == email)
        result = await self.db.execute(q)
        return result.scalars().first()

    async def find_restaurant(self, restaurant_id: uuid.UUID) -> Optional[Restaurant]:
        return await self.db.get(Restaurant, restaurant_id)

    async def list_restaurants(self) -> list[Restaurant]:
        result = await self.db.execute(select(Restaurant).order_by(Restaurant.name))
        return list(result.scalars().all())
