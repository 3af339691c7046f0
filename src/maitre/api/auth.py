"""Auth API — login and current user.

Learn: Routes for the session lifecycle:
- POST /auth/login → email/password → signed session token + user
- GET /auth/me → current user info (how clients re-validate a stored token)

There is no logout route: tokens are stateless, so logging out is the
client discarding its token.
"""

from typing import Any, Optional

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from maitre.auth.credentials import CredentialVerifier
from maitre.auth.dependencies import (
    get_credential_verifier,
    get_token_issuer,
    require_staff,
)
from maitre.auth.errors import InvalidCredentials
from maitre.auth.identity import AuthenticatedUser, CurrentIdentity
from maitre.auth.jwt import TokenIssuer

logger = structlog.get_logger()

router = APIRouter(prefix="/auth")

LOGIN_FIELDS_REQUIRED = "Email and password required"


# ─── Schemas ─────────────────────────────────────────────


class LoginRequest(BaseModel):
    # Untyped: a missing field gets the 400 below, a non-string one is a
    # credential that matches nobody.
    email: Any = None
    password: Any = None


class RestaurantSummary(BaseModel):
    id: str
    name: str


class UserPublic(BaseModel):
    id: str
    name: str
    email: str
    role: str
    restaurant: RestaurantSummary


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserPublic


class MeResponse(BaseModel):
    user: UserPublic


# ─── Login ───────────────────────────────────────────────


@router.post("/login", response_model=LoginResponse)
async def login(
    body: Optional[LoginRequest] = None,
    credentials: CredentialVerifier = Depends(get_credential_verifier),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """Login with email and password → session token."""
    if body is None or not body.email or not body.password:
        return JSONResponse(status_code=400, content={"error": LOGIN_FIELDS_REQUIRED})
    if not isinstance(body.email, str) or not isinstance(body.password, str):
        raise InvalidCredentials("non-string credential field")

    auth = await credentials.verify(body.email, body.password)
    token = issuer.issue(auth.user)

    logger.info("auth.login_succeeded", user_id=str(auth.user.id))
    return {
        "message": "Login successful",
        "token": token,
        "user": auth.to_public(),
    }


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=MeResponse)
async def get_me(identity: CurrentIdentity = Depends(require_staff)):
    """Get the current authenticated user's info."""
    auth = AuthenticatedUser(user=identity.user, restaurant=identity.user.restaurant)
    return {"user": auth.to_public()}
