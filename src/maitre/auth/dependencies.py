"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers. Each protected
route composes exactly one require_* dependency; all of them delegate to
AccessGuard, so the checks exist in one place only.

    @router.get("/restaurants/current")
    async def current(identity: CurrentIdentity = Depends(require_admin)): ...

The resolved identity is returned and also stored on request.state.identity
for middleware or handlers further down.
"""

import uuid
from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from maitre.auth.credentials import CredentialVerifier
from maitre.auth.guard import AccessGuard
from maitre.auth.identity import CurrentIdentity
from maitre.auth.jwt import TokenConfig, TokenIssuer, TokenVerifier
from maitre.auth.roles import Role
from maitre.db.engine import get_db
from maitre.db.repository import SqlUserRepository, UserRepository


def get_token_config(request: Request) -> TokenConfig:
    """The frozen signing config create_app() put on app.state."""
    return request.app.state.token_config


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return SqlUserRepository(db)


def get_token_issuer(config: TokenConfig = Depends(get_token_config)) -> TokenIssuer:
    return TokenIssuer(config)


def get_token_verifier(
    config: TokenConfig = Depends(get_token_config),
    repository: UserRepository = Depends(get_user_repository),
) -> TokenVerifier:
    return TokenVerifier(config, repository)


def get_credential_verifier(
    repository: UserRepository = Depends(get_user_repository),
) -> CredentialVerifier:
    return CredentialVerifier(repository)


def get_access_guard(verifier: TokenVerifier = Depends(get_token_verifier)) -> AccessGuard:
    return AccessGuard(verifier)


def require_role(role: Role):
    """Build a dependency admitting callers whose role dominates `role`."""

    async def dependency(
        request: Request,
        authorization: Optional[str] = Header(None),
        guard: AccessGuard = Depends(get_access_guard),
    ) -> CurrentIdentity:
        identity = await guard.check(authorization, role)
        request.state.identity = identity
        return identity

    return dependency


def require_restaurant_role(role: Role):
    """Like require_role, scoped to the {restaurant_id} path parameter.

    Members of other restaurants are refused unless they are super admins.
    """

    async def dependency(
        restaurant_id: uuid.UUID,
        request: Request,
        authorization: Optional[str] = Header(None),
        guard: AccessGuard = Depends(get_access_guard),
    ) -> CurrentIdentity:
        identity = await guard.check(authorization, role, restaurant_id=restaurant_id)
        request.state.identity = identity
        return identity

    return dependency


require_staff = require_role(Role.STAFF)
require_admin = require_role(Role.ADMIN)
require_super_admin = require_role(Role.SUPER_ADMIN)
require_restaurant_admin = require_restaurant_role(Role.ADMIN)
