"""HTTP side of the client session.

Learn: AuthService wraps an httpx.AsyncClient pointed at the API root
(e.g. http://localhost:5000/api) and a SessionStore:

    login(email, password)  POST /auth/login, persist token + user
    verify_token()          GET /auth/me with the stored token
    logout()                forget token + user (no server call)
    get_token() / get_current_user() / is_authenticated()

authenticate() and persist() are the two halves of login(), split so
SessionManager can drop a result that arrives after the session has
moved on.
"""

from typing import Optional

import httpx
import structlog

from maitre.client.models import LoginResult, SessionUser
from maitre.client.store import SessionStore

logger = structlog.get_logger()


class AuthClientError(Exception):
    """The API refused a request. message is the server's "error" text."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _raise_for_error(resp: httpx.Response) -> None:
    if resp.is_success:
        return
    try:
        message = resp.json().get("error") or resp.reason_phrase
    except (ValueError, AttributeError):
        message = resp.reason_phrase
    raise AuthClientError(resp.status_code, message)


class AuthService:
    def __init__(self, http: httpx.AsyncClient, store: SessionStore):
        self.http = http
        self.store = store

    async def authenticate(self, email: str, password: str) -> LoginResult:
        """POST the credentials. Does not touch the store."""
        resp = await self.http.post("/auth/login", json={"email": email, "password": password})
        _raise_for_error(resp)
        return LoginResult.model_validate(resp.json())

    def persist(self, result: LoginResult) -> None:
        self.store.save(result.token, result.user)

    async def login(self, email: str, password: str) -> SessionUser:
        logger.info("auth_client.login", email=email)
        result = await self.authenticate(email, password)
        self.persist(result)
        return result.user

    async def verify_token(self) -> SessionUser:
        token = self.get_token()
        if not token:
            raise AuthClientError(401, "No token, authorization denied")
        resp = await self.http.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        _raise_for_error(resp)
        body = resp.json()
        if not isinstance(body, dict) or not isinstance(body.get("user"), dict):
            raise AuthClientError(resp.status_code, "Malformed user response")
        return SessionUser.model_validate(body["user"])

    def cache_user(self, user: SessionUser) -> None:
        self.store.save_user(user)

    def logout(self) -> None:
        self.store.clear()

    def get_token(self) -> Optional[str]:
        return self.store.get_token()

    def get_current_user(self) -> Optional[SessionUser]:
        return self.store.get_user()

    def is_authenticated(self) -> bool:
        return self.get_token() is not None
