"""Authentication error taxonomy.

Learn: every way a login or a protected request can fail has its own
exception class, tagged with an AuthErrorKind. The kind is what tests and
the audit log look at. The public_message/status_code pair is what the
caller sees, and several kinds deliberately share one pair so a client
can't tell *why* its token was rejected.

    kind                 status  public message
    invalid_credentials  400     Invalid credentials
    malformed_token      401     Token invalid
    invalid_signature    401     Token invalid
    token_expired        401     Token invalid
    unknown_subject      401     Token invalid
    account_deactivated  401     Token invalid
    missing_token        401     No token, authorization denied
    insufficient_role    403     Admin access required
    upstream_failure     500     Server error
"""

import enum
from typing import ClassVar


class AuthErrorKind(str, enum.Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    MALFORMED_TOKEN = "malformed_token"
    INVALID_SIGNATURE = "invalid_signature"
    TOKEN_EXPIRED = "token_expired"
    UNKNOWN_SUBJECT = "unknown_subject"
    ACCOUNT_DEACTIVATED = "account_deactivated"
    MISSING_TOKEN = "missing_token"
    INSUFFICIENT_ROLE = "insufficient_role"
    UPSTREAM_FAILURE = "upstream_failure"


TOKEN_INVALID = "Token invalid"


class AuthError(Exception):
    """Base class. Subclasses pin kind, status_code and public_message."""

    kind: ClassVar[AuthErrorKind]
    status_code: ClassVar[int] = 401
    public_message: ClassVar[str] = TOKEN_INVALID

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.kind.value)
        self.detail = detail


class InvalidCredentials(AuthError):
    """Unknown email, wrong password or deactivated account at login."""

    kind = AuthErrorKind.INVALID_CREDENTIALS
    status_code = 400
    public_message = "Invalid credentials"


class MalformedToken(AuthError):
    kind = AuthErrorKind.MALFORMED_TOKEN


class InvalidSignature(AuthError):
    kind = AuthErrorKind.INVALID_SIGNATURE


class TokenExpired(AuthError):
    kind = AuthErrorKind.TOKEN_EXPIRED


class UnknownSubject(AuthError):
    kind = AuthErrorKind.UNKNOWN_SUBJECT


class AccountDeactivated(AuthError):
    kind = AuthErrorKind.ACCOUNT_DEACTIVATED


class MissingToken(AuthError):
    kind = AuthErrorKind.MISSING_TOKEN
    public_message = "No token, authorization denied"


class InsufficientRole(AuthError):
    kind = AuthErrorKind.INSUFFICIENT_ROLE
    status_code = 403
    public_message = "Admin access required"


class UpstreamFailure(AuthError):
    """The user store could not be reached. Detail goes to the log only."""

    kind = AuthErrorKind.UPSTREAM_FAILURE
    status_code = 500
    public_message = "Server error"
