"""Access guard — the single gate in front of every privileged operation.

Learn: the guard is plain Python (no FastAPI types) so it can be tested
directly and reused outside HTTP. dependencies.py wraps it for routes.

    Authorization header ──► bearer token ──► TokenVerifier ──► role check
         (MissingToken)                      (token failures)  (InsufficientRole)

Tenant scoping: when a restaurant_id is given, only members of that
restaurant pass, except super admins whose authority is global.
"""

import uuid
from typing import Optional

from maitre.auth.errors import InsufficientRole, MissingToken
from maitre.auth.identity import CurrentIdentity
from maitre.auth.jwt import TokenVerifier
from maitre.auth.roles import Role


def extract_bearer_token(authorization: Optional[str]) -> str:
    """Pull <token> out of "Bearer <token>". Anything else counts as no token."""
    if not authorization:
        raise MissingToken("no Authorization header")
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise MissingToken("Authorization header is not a bearer token")
    return token


class AccessGuard:
    def __init__(self, verifier: TokenVerifier):
        self.verifier = verifier

    async def check(
        self,
        authorization: Optional[str],
        required_role: Role = Role.STAFF,
        restaurant_id: Optional[uuid.UUID] = None,
    ) -> CurrentIdentity:
        token = extract_bearer_token(authorization)
        identity = CurrentIdentity.from_authenticated(await self.verifier.verify(token))

        if not identity.role.dominates(required_role):
            raise InsufficientRole(
                f"role {identity.role.value} below {required_role.value}"
            )
        if restaurant_id is not None and not identity.can_access_restaurant(restaurant_id):
            raise InsufficientRole(f"user not a member of restaurant {restaurant_id}")
        return identity
