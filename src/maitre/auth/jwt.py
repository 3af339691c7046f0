"""JWT session token creation and verification.

Learn: JWT (JSON Web Token) provides stateless authentication. One token
per login, valid for 7 days, never stored server-side. It carries:

    {"userId", "email", "restaurantId", "iat", "exp", "jti"}

jti is random, so two tokens issued to the same user always differ.

Both TokenIssuer and TokenVerifier take a frozen TokenConfig (secret,
algorithm, lifetime) and a clock at construction. Nothing here reads
global settings, which lets tests mint tokens under other secrets or at
other instants.

Verification order matters and is fixed:
    parse → signature → expiry → user lookup → active flag
Each failure raises its own AuthError subclass.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

import jwt
import structlog
from sqlalchemy.exc import SQLAlchemyError

from maitre.auth.errors import (
    AccountDeactivated,
    InvalidSignature,
    MalformedToken,
    TokenExpired,
    UnknownSubject,
    UpstreamFailure,
)
from maitre.auth.identity import AuthenticatedUser
from maitre.db.models import User
from maitre.db.repository import UserRepository

logger = structlog.get_logger()

Clock = Callable[[], datetime]

REQUIRED_CLAIMS = ("userId", "restaurantId", "iat", "exp")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenConfig:
    """Signing parameters. Built once at startup, never mutated."""

    secret: str
    algorithm: str = "HS256"
    lifetime: timedelta = timedelta(days=7)


class TokenIssuer:
    """Mints signed session tokens for verified users."""

    def __init__(self, config: TokenConfig, clock: Clock = utcnow):
        self.config = config
        self.clock = clock

    def issue(self, user: User) -> str:
        iat = int(self.clock().timestamp())
        payload = {
            "userId": str(user.id),
            "email": user.email,
            "restaurantId": str(user.restaurant_id),
            "iat": iat,
            "exp": iat + int(self.config.lifetime.total_seconds()),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self.config.secret, algorithm=self.config.algorithm)


class TokenVerifier:
    """Resolves a raw token to a live, active user — or raises."""

    def __init__(
        self,
        config: TokenConfig,
        repository: UserRepository,
        clock: Clock = utcnow,
    ):
        self.config = config
        self.repository = repository
        self.clock = clock

    def decode(self, raw_token: str) -> dict:
        """Check structure, signature and expiry. Returns the claims.

        Learn: PyJWT's own exp/iat checks are switched off so expiry is
        judged against the injected clock, and always after the signature.
        """
        try:
            claims = jwt.decode(
                raw_token,
                self.config.secret,
                algorithms=[self.config.algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": list(REQUIRED_CLAIMS),
                },
            )
        except jwt.InvalidSignatureError as e:
            raise InvalidSignature(str(e))
        except jwt.InvalidTokenError as e:
            raise MalformedToken(str(e))

        exp = claims["exp"]
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise MalformedToken("exp claim is not a timestamp")
        if self.clock().timestamp() >= exp:
            raise TokenExpired(f"expired at {exp}")
        return claims

    async def verify(self, raw_token: str) -> AuthenticatedUser:
        claims = self.decode(raw_token)

        try:
            user_id = uuid.UUID(str(claims["userId"]))
        except ValueError:
            raise MalformedToken("userId claim is not a UUID")

        try:
            user = await self.repository.find_by_id(user_id)
        except SQLAlchemyError as e:
            logger.error("auth.repository_unavailable", op="find_by_id", error=str(e))
            raise UpstreamFailure(str(e))

        if user is None:
            raise UnknownSubject(f"no user {user_id}")
        if not user.is_active:
            raise AccountDeactivated(f"user {user_id} is deactivated")

        return AuthenticatedUser(user=user, restaurant=user.restaurant)
