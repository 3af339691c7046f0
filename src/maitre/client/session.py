"""Client session state machine.

Learn: the manager owns one SessionState and is the only thing that
changes it. Legal moves:

    UNKNOWN ──start(), token+user cached──► VERIFYING ──ok──► AUTHENTICATED
       │                                        │
       └──start(), nothing cached──┐            └──any failure──┐ (store cleared)
                                   ▼                            ▼
                            UNAUTHENTICATED ◄───────────────────┘
                                   │   ▲
                          login()  ▼   │ login() fails (re-raised)
                               VERIFYING
                                   │ ok
                                   ▼
                            AUTHENTICATED ──logout()──► UNAUTHENTICATED

Every transition bumps a generation counter. Anything that awaits the
network remembers the generation it started under and, if that is no
longer current when the answer arrives, throws the answer away. That is
how login() supersedes a pending startup verification, and how a
logout() wins over a login still in flight.
"""

import enum
from dataclasses import dataclass
from typing import Callable, Optional

import httpx
import structlog

from maitre.client.models import SessionUser
from maitre.client.service import AuthClientError, AuthService

logger = structlog.get_logger()

# A verification "fails for any reason": refusal, transport error, garbage body.
VERIFY_FAILURES = (AuthClientError, httpx.HTTPError, ValueError, KeyError)


class SessionStatus(str, enum.Enum):
    UNKNOWN = "unknown"
    VERIFYING = "verifying"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


@dataclass(frozen=True)
class SessionState:
    status: SessionStatus
    user: Optional[SessionUser] = None


LEGAL_TRANSITIONS = {
    (SessionStatus.UNKNOWN, SessionStatus.VERIFYING),
    (SessionStatus.UNKNOWN, SessionStatus.UNAUTHENTICATED),
    (SessionStatus.VERIFYING, SessionStatus.AUTHENTICATED),
    (SessionStatus.VERIFYING, SessionStatus.UNAUTHENTICATED),
    (SessionStatus.UNAUTHENTICATED, SessionStatus.VERIFYING),
    (SessionStatus.AUTHENTICATED, SessionStatus.UNAUTHENTICATED),
}


class SessionStateError(Exception):
    """An operation was called in a state that does not allow it."""


Listener = Callable[[SessionState], None]


class SessionManager:
    def __init__(self, service: AuthService):
        self.service = service
        self._state = SessionState(SessionStatus.UNKNOWN)
        self._generation = 0
        self._listeners: list[Listener] = []

    # ─── Read-only view ─────────────────────────────────

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def user(self) -> Optional[SessionUser]:
        return self._state.user

    @property
    def is_authenticated(self) -> bool:
        return self._state.status is SessionStatus.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self._state.status is SessionStatus.VERIFYING

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` after every state change. Returns an unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ─── Transitions ────────────────────────────────────

    def _transition(self, status: SessionStatus, user: Optional[SessionUser] = None) -> int:
        current = self._state.status
        if (current, status) not in LEGAL_TRANSITIONS:
            raise SessionStateError(f"illegal transition {current.value} -> {status.value}")
        self._generation += 1
        self._state = SessionState(status, user)
        logger.debug("session.transition", frm=current.value, to=status.value)
        for listener in list(self._listeners):
            listener(self._state)
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def start(self) -> SessionState:
        """Resolve the UNKNOWN startup state from whatever was persisted."""
        if self._state.status is not SessionStatus.UNKNOWN:
            raise SessionStateError("session already started")

        if not self.service.get_token() or not self.service.get_current_user():
            self._transition(SessionStatus.UNAUTHENTICATED)
            return self._state

        generation = self._transition(SessionStatus.VERIFYING)
        try:
            user = await self.service.verify_token()
        except VERIFY_FAILURES as e:
            if not self._is_current(generation):
                logger.debug("session.stale_result_discarded", op="verify")
                return self._state
            logger.info("session.verification_failed", error=str(e))
            self.service.logout()
            self._transition(SessionStatus.UNAUTHENTICATED)
            return self._state

        if not self._is_current(generation):
            logger.debug("session.stale_result_discarded", op="verify")
            return self._state
        self.service.cache_user(user)
        self._transition(SessionStatus.AUTHENTICATED, user)
        return self._state

    async def login(self, email: str, password: str) -> SessionUser:
        """Log in. Raises whatever the service raised, after resetting state.

        Allowed from UNAUTHENTICATED, or from VERIFYING where it supersedes
        the pending startup verification.
        """
        status = self._state.status
        superseded = status is SessionStatus.VERIFYING
        if superseded:
            self._generation += 1
            generation = self._generation
            logger.info("session.verification_superseded")
        elif status is SessionStatus.UNAUTHENTICATED:
            generation = self._transition(SessionStatus.VERIFYING)
        else:
            raise SessionStateError(f"cannot log in while {status.value}")

        try:
            result = await self.service.authenticate(email, password)
        except Exception:
            if self._is_current(generation):
                if superseded:
                    # The startup token was never confirmed; drop it with the attempt.
                    self.service.logout()
                self._transition(SessionStatus.UNAUTHENTICATED)
            raise

        if not self._is_current(generation):
            logger.debug("session.stale_result_discarded", op="login")
            raise SessionStateError("login superseded by a newer session change")
        self.service.persist(result)
        self._transition(SessionStatus.AUTHENTICATED, result.user)
        return result.user

    def logout(self) -> None:
        """Forget the session now, whatever the network is doing."""
        self.service.logout()
        if self._state.status is not SessionStatus.UNAUTHENTICATED:
            self._transition(SessionStatus.UNAUTHENTICATED)
