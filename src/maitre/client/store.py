"""Persistence for the client's token and cached user.

Learn: a browser keeps these in localStorage under "token" and "user";
here the same two values go through a SessionStore. MemorySessionStore
is for tests and short-lived processes, FileSessionStore survives
restarts (the CLI keeps ~/.maitre/session.json).
"""

import json
import os
from pathlib import Path
from typing import Optional, Protocol

import structlog
from pydantic import ValidationError

from maitre.client.models import SessionUser

logger = structlog.get_logger()


class SessionStore(Protocol):
    def get_token(self) -> Optional[str]: ...

    def get_user(self) -> Optional[SessionUser]: ...

    def save(self, token: str, user: SessionUser) -> None: ...

    def save_user(self, user: SessionUser) -> None: ...

    def clear(self) -> None: ...


class MemorySessionStore:
    def __init__(self, token: Optional[str] = None, user: Optional[SessionUser] = None):
        self.token = token
        self.user = user

    def get_token(self) -> Optional[str]:
        return self.token

    def get_user(self) -> Optional[SessionUser]:
        return self.user

    def save(self, token: str, user: SessionUser) -> None:
        self.token = token
        self.user = user

    def save_user(self, user: SessionUser) -> None:
        self.user = user

    def clear(self) -> None:
        self.token = None
        self.user = None


class FileSessionStore:
    """JSON file holding {"token": ..., "user": {...}}, readable by owner only."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> dict:
        try:
            data = json.loads(self.path.read_text())
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("session.store_unreadable", path=str(self.path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            json.dump(data, f)

    def get_token(self) -> Optional[str]:
        token = self._read().get("token")
        return token if isinstance(token, str) and token else None

    def get_user(self) -> Optional[SessionUser]:
        raw = self._read().get("user")
        if not raw:
            return None
        try:
            return SessionUser.model_validate(raw)
        except ValidationError:
            logger.warning("session.cached_user_invalid", path=str(self.path))
            return None

    def save(self, token: str, user: SessionUser) -> None:
        self._write({"token": token, "user": user.model_dump()})

    def save_user(self, user: SessionUser) -> None:
        data = self._read()
        data["user"] = user.model_dump()
        self._write(data)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
