"""
Client-side auth state.

``SessionStore`` is the durable key/value mirror (a JSON file under fixed
keys); ``AuthManager`` owns the in-memory session and keeps both in step.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"
PENDING_EMAIL_KEY = "pendingVerificationEmail"

DEFAULT_SESSION_PATH = Path.home() / ".todo_app" / "session.json"


class SessionStore:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else DEFAULT_SESSION_PATH

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".session-")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f)
            os.replace(tmp, self.path)
        except BaseException:
            os.unlink(tmp)
            raise

    def get(self, key: str) -> Any:
        return self._read().get(key)

    def update(self, values: dict) -> None:
        """Sets (or removes, for ``None`` values) several keys in one write."""
        data = self._read()
        for key, value in values.items():
            if value is None:
                data.pop(key, None)
            else:
                data[key] = value
        self._write(data)

    def clear_auth(self) -> None:
        self.update({TOKEN_KEY: None, USER_KEY: None})

    def clear(self) -> None:
        self._write({})


@dataclass
class Session:
    user: Optional[dict] = None
    token: Optional[str] = None
    pending_verification_email: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token and self.user)

    @property
    def is_verification_pending(self) -> bool:
        return self.pending_verification_email is not None


class AuthManager:
    def __init__(self, api, store: SessionStore):
        self.api = api
        self.store = store
        self.session = Session()
        api.on_unauthorized = self._expire

    def load(self) -> Session:
        token = self.store.get(TOKEN_KEY)
        user = self.store.get(USER_KEY)
        session = Session(pending_verification_email=self.store.get(PENDING_EMAIL_KEY))
        if token and user:
            session.token = token
            session.user = json.loads(user)
        self.session = session
        return session

    def _set(self, **changes) -> None:
        values = {}
        if "token" in changes:
            values[TOKEN_KEY] = changes["token"]
        if "user" in changes:
            values[USER_KEY] = json.dumps(changes["user"]) if changes["user"] is not None else None
        if "pending_verification_email" in changes:
            values[PENDING_EMAIL_KEY] = changes["pending_verification_email"]
        self.store.update(values)
        for name, value in changes.items():
            setattr(self.session, name, value)

    def _expire(self) -> None:
        self.session.token = None
        self.session.user = None

    async def login(self, email: str, password: str):
        result = await self.api.login(email, password)
        if result.ok:
            self._set(
                token=result.data["token"],
                user=result.data["user"],
                pending_verification_email=None,
            )
        return result

    async def register(self, name: str, email: str, password: str):
        result = await self.api.register(name, email, password)
        if result.ok:
            self._set(pending_verification_email=email)
        return result

    async def verify_email(self, email: str, otp: str):
        result = await self.api.verify_email(email, otp)
        if result.ok:
            self._set(pending_verification_email=None)
        return result

    async def resend_verification_code(self, email: str):
        return await self.api.resend_verification_code(email)

    def logout(self) -> None:
        self.store.clear()
        self.session = Session()
