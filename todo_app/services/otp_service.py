import logging
import secrets
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from todo_app.errors import InvalidOtp, NotFound, OtpExpired
from todo_app.models.user import User
from todo_app.repositories.user_repo import UserRepository
from todo_app.services.mailer import Mailer
from todo_app.timeutils import utcnow

logger = logging.getLogger(__name__)

OTP_MIN = 100000
OTP_MAX = 999999


def generate_otp() -> str:
    """Uniform 6-digit code in [100000, 999999]."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


class OtpService:
    def __init__(self, mailer: Mailer, expires_minutes: int = 10, clock=utcnow):
        self.repo = UserRepository()
        self.mailer = mailer
        self.expires_minutes = expires_minutes
        self.clock = clock

    def assign(self, user: User) -> str:
        """Stores a fresh code and expiry on the record without flushing or sending."""
        code = generate_otp()
        user.otp_code = code
        user.otp_expiry = self.clock() + timedelta(minutes=self.expires_minutes)
        return code

    async def deliver(self, user: User) -> str:
        """Sends the code currently stored on the record."""
        await self.mailer.send_otp(user.email, user.name, user.otp_code)
        return user.otp_code

    async def issue(self, db: AsyncSession, user: User) -> str:
        self.assign(user)
        await self.repo.save(db, user)
        await db.commit()
        return await self.deliver(user)

    async def verify(self, db: AsyncSession, email: str, code: str) -> bool:
        """
        Marks the user verified when ``code`` matches and has not expired.

        Returns False when the user was already verified (nothing changes),
        True when this call performed the transition.
        """
        user = await self.repo.get_by_email(db, email)
        if not user:
            raise NotFound("User not found")
        if user.is_verified:
            return False
        if user.otp_code is None or user.otp_code != code:
            logger.warning(f"Invalid OTP submitted for {email}")
            raise InvalidOtp()
        if user.otp_expiry is not None and self.clock() > user.otp_expiry:
            logger.warning(f"Expired OTP submitted for {email}")
            raise OtpExpired()

        user.is_verified = True
        user.otp_code = None
        user.otp_expiry = None
        await self.repo.save(db, user)
        await db.commit()
        return True

    async def resend(self, db: AsyncSession, email: str) -> bool:
        """Regenerates the code for a pending user; touches no other attribute."""
        user = await self.repo.get_by_email(db, email)
        if not user:
            raise NotFound("User not found")
        if user.is_verified:
            return False
        await self.issue(db, user)
        return True
