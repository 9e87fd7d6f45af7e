from datetime import timedelta
from typing import Optional

import jwt

from todo_app.errors import Unauthorized
from todo_app.timeutils import utcnow


class SessionService:
    """Stateless signed bearer tokens bound to a user id."""

    def __init__(self, secret: str, algorithm: str = "HS256", expires_minutes: int = 60, clock=utcnow):
        self.secret = secret
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes
        self.clock = clock

    def issue(self, user_id: int) -> str:
        payload = {
            "id": user_id,
            "exp": self.clock() + timedelta(minutes=self.expires_minutes),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> int:
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.InvalidTokenError:
            raise Unauthorized("Invalid or expired token")
        user_id = payload.get("id")
        if not isinstance(user_id, int):
            raise Unauthorized("Invalid or expired token")
        return user_id

    def authenticate(self, authorization: Optional[str]) -> int:
        """Resolves an ``Authorization`` header value to the bound user id."""
        if not authorization:
            raise Unauthorized("No token provided")
        parts = authorization.split(" ")
        if len(parts) != 2 or parts[0] != "Bearer" or not parts[1]:
            raise Unauthorized("Malformed token")
        return self.decode(parts[1])
