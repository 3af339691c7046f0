"""Email/password verification.

Learn: all three ways a login can fail — unknown email, wrong password,
deactivated account — raise the same InvalidCredentials so the response
never reveals which accounts exist. bcrypt always runs, against
DUMMY_HASH when there is no user, to keep timing flat as well.
"""

import structlog
from sqlalchemy.exc import SQLAlchemyError

from maitre.auth.errors import InvalidCredentials, UpstreamFailure
from maitre.auth.identity import AuthenticatedUser
from maitre.auth.password import DUMMY_HASH, verify_password
from maitre.db.repository import UserRepository

logger = structlog.get_logger()


class CredentialVerifier:
    def __init__(self, repository: UserRepository):
        self.repository = repository

    async def verify(self, email: str, password: str) -> AuthenticatedUser:
        try:
            user = await self.repository.find_by_email(email)
        except SQLAlchemyError as e:
            logger.error("auth.repository_unavailable", op="find_by_email", error=str(e))
            raise UpstreamFailure(str(e))

        if user is None:
            verify_password(password, DUMMY_HASH)
            raise InvalidCredentials("unknown email")
        if not verify_password(password, user.password_hash):
            raise InvalidCredentials("password mismatch")
        if not user.is_active:
            raise InvalidCredentials("account deactivated")

        return AuthenticatedUser(user=user, restaurant=user.restaurant)
