from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header

from todo_app.config import get_settings
from todo_app.services.auth_service import AuthService
from todo_app.services.mailer import Mailer, build_mailer
from todo_app.services.otp_service import OtpService
from todo_app.services.session_service import SessionService
from todo_app.services.todo_service import TodoService


@lru_cache
def get_mailer() -> Mailer:
    return build_mailer(get_settings())


def get_session_service() -> SessionService:
    settings = get_settings()
    return SessionService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.jwt_expires_minutes,
    )


def get_otp_service(mailer: Mailer = Depends(get_mailer)) -> OtpService:
    return OtpService(mailer, expires_minutes=get_settings().otp_expires_minutes)


def get_auth_service(
    otp: OtpService = Depends(get_otp_service),
    sessions: SessionService = Depends(get_session_service),
) -> AuthService:
    return AuthService(otp, sessions)


def get_todo_service() -> TodoService:
    return TodoService()


async def get_current_user_id(
    authorization: Optional[str] = Header(None),
    sessions: SessionService = Depends(get_session_service),
) -> int:
    """Id of the bearer of ``Authorization: Bearer <token>``; 401 otherwise."""
    return sessions.authenticate(authorization)
