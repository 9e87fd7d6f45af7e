import logging
import re

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from werkzeug.security import check_password_hash, generate_password_hash

from todo_app.errors import Conflict, Forbidden, Unauthorized, ValidationError
from todo_app.models.user import User
from todo_app.repositories.user_repo import UserRepository
from todo_app.schemas.auth import LoginRequest, RegisterRequest, ResendRequest, UserOut, VerifyRequest
from todo_app.services.otp_service import OtpService
from todo_app.services.session_service import SessionService

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")


class AuthService:
    def __init__(self, otp: OtpService, sessions: SessionService):
        self.repo = UserRepository()
        self.otp = otp
        self.sessions = sessions

    async def register(self, db: AsyncSession, data: RegisterRequest) -> dict:
        if not data.name or not data.email or not data.password:
            logger.warning("Register attempt with missing fields.")
            raise ValidationError("Missing fields")
        if not EMAIL_RE.fullmatch(data.email):
            raise ValidationError("Invalid email address")

        if await self.repo.email_exists(db, data.email):
            logger.warning(f"Register attempt with existing email: {data.email}")
            raise Conflict("Email already registered")

        user = User(
            name=data.name,
            email=data.email,
            password=generate_password_hash(data.password, method="pbkdf2:sha256"),
            is_verified=False,
        )
        self.otp.assign(user)
        try:
            await self.repo.create(db, user)
            await db.commit()
        except IntegrityError:
            # lost a race against a concurrent registration of the same email
            await db.rollback()
            raise Conflict("Email already registered")

        logger.info(f"New user {user.email} registered; verification pending.")
        await self.otp.deliver(user)

        return {
            "message": "User registered. Verification OTP sent to email.",
            "token": self.sessions.issue(user.id),
            "email": user.email,
        }

    async def verify(self, db: AsyncSession, data: VerifyRequest) -> dict:
        if not data.email or not data.otp:
            raise ValidationError("Missing OTP or email")
        if await self.otp.verify(db, data.email, data.otp):
            logger.info(f"User {data.email} verified their email.")
            return {"message": "Email verified successfully"}
        return {"message": "Email already verified"}

    async def resend(self, db: AsyncSession, data: ResendRequest) -> dict:
        if not data.email:
            raise ValidationError("Missing email")
        if await self.otp.resend(db, data.email):
            logger.info(f"Verification code re-sent to {data.email}.")
            return {"message": "Verification OTP re-sent to email."}
        return {"message": "Email already verified"}

    async def login(self, db: AsyncSession, data: LoginRequest) -> dict:
        if not data.email or not data.password:
            raise ValidationError("Missing fields")

        user = await self.repo.get_by_email(db, data.email)
        if not user or not check_password_hash(user.password, data.password):
            logger.warning(f"Failed login attempt for email: {data.email}")
            raise Unauthorized("Invalid credentials")
        if not user.is_verified:
            logger.warning(f"Login attempt by unverified user: {data.email}")
            raise Forbidden("Email not verified")

        logger.info(f"User {user.email} logged in successfully.")
        return {"token": self.sessions.issue(user.id), "user": UserOut.model_validate(user)}
