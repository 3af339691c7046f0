"""Resolved identities handed from the auth core to the rest of the app."""

import uuid
from dataclasses import dataclass
from typing import Optional

from maitre.auth.roles import Role
from maitre.db.models import Restaurant, User


@dataclass(frozen=True)
class AuthenticatedUser:
    """A user record together with its (already joined) restaurant."""

    user: User
    restaurant: Restaurant

    def to_public(self) -> dict:
        """Shape returned by /auth/login and /auth/me — never the hash."""
        return {
            "id": str(self.user.id),
            "name": self.user.name,
            "email": self.user.email,
            "role": Role(self.user.role).value,
            "restaurant": {
                "id": str(self.restaurant.id),
                "name": self.restaurant.name,
            },
        }


class CurrentIdentity:
    """Represents the authenticated identity making the request.

    Learn: This is what the access guard attaches to request.state for
    downstream handlers: who is calling, with which role, on behalf of
    which restaurant, plus the full user record.
    """

    def __init__(
        self,
        user_id: uuid.UUID,
        role: Role,
        restaurant_id: uuid.UUID,
        user: Optional[User] = None,
    ):
        self.user_id = user_id
        self.role = role
        self.restaurant_id = restaurant_id
        self.user = user

    @classmethod
    def from_authenticated(cls, auth: AuthenticatedUser) -> "CurrentIdentity":
        return cls(
            user_id=auth.user.id,
            role=Role(auth.user.role),
            restaurant_id=auth.restaurant.id,
            user=auth.user,
        )

    def can_access_restaurant(self, restaurant_id: uuid.UUID) -> bool:
        return self.role.is_global or self.restaurant_id == restaurant_id
