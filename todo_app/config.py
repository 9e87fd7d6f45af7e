from dataclasses import dataclass, field
from functools import lru_cache
from os import getenv

from dotenv import load_dotenv

load_dotenv()


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value) if value else default
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    database_url: str = field(
        default_factory=lambda: getenv("DATABASE_URL", "sqlite+aiosqlite:///./todo_app.db")
    )

    # Session tokens
    jwt_secret: str = field(default_factory=lambda: getenv("JWT_SECRET", "secret"))
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = field(
        default_factory=lambda: _parse_int(getenv("JWT_EXPIRES_MINUTES", ""), 60)
    )

    # One-time codes
    otp_expires_minutes: int = field(
        default_factory=lambda: _parse_int(getenv("OTP_EXPIRES_MINUTES", ""), 10)
    )

    # Mail (empty api key = codes are only logged)
    brevo_api_key: str = field(default_factory=lambda: getenv("BREVO_API_KEY", ""))
    mail_sender_email: str = field(
        default_factory=lambda: getenv("MAIL_SENDER_EMAIL", "no-reply@todo.local")
    )
    mail_sender_name: str = field(default_factory=lambda: getenv("MAIL_SENDER_NAME", "Todo App"))

    log_level: str = field(default_factory=lambda: getenv("LOG_LEVEL", "INFO"))


@lru_cache
def get_settings() -> Settings:
    return Settings()
