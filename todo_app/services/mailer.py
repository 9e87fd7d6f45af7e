import logging

import sib_api_v3_sdk
from sib_api_v3_sdk.rest import ApiException
from starlette.concurrency import run_in_threadpool

from todo_app.config import Settings, get_settings
from todo_app.errors import MailDeliveryError

logger = logging.getLogger(__name__)


def render_otp_email(name: str, code: str, expires_minutes: int) -> str:
    return (
        f"<p>Hello {name},</p>"
        f"<p>Please enter the code <b>{code}</b> to verify your email. "
        f"This OTP is valid for {expires_minutes} minutes.</p>"
    )


class Mailer:
    """Out-of-band delivery of verification codes."""

    async def send_otp(self, to_email: str, name: str, code: str) -> None:
        raise NotImplementedError


class LogMailer(Mailer):
    """Development transport: writes the code to the log instead of sending it."""

    async def send_otp(self, to_email: str, name: str, code: str) -> None:
        logger.info(f"Verification code for {to_email}: {code}")


class BrevoMailer(Mailer):
    def __init__(self, settings: Settings):
        self.settings = settings
        configuration = sib_api_v3_sdk.Configuration()
        configuration.api_key["api-key"] = settings.brevo_api_key
        self.api_instance = sib_api_v3_sdk.TransactionalEmailsApi(sib_api_v3_sdk.ApiClient(configuration))

    async def send_otp(self, to_email: str, name: str, code: str) -> None:
        send_smtp_email = sib_api_v3_sdk.SendSmtpEmail(
            to=[{"email": to_email, "name": name}],
            sender={"name": self.settings.mail_sender_name, "email": self.settings.mail_sender_email},
            subject="Verify Your Email",
            html_content=render_otp_email(name, code, self.settings.otp_expires_minutes),
        )
        try:
            # blocking SDK call
            api_response = await run_in_threadpool(self.api_instance.send_transac_email, send_smtp_email)
            logger.info(f"OTP email sent to {to_email}: {api_response}")
        except ApiException as e:
            logger.error(f"Exception when calling TransactionalEmailsApi->send_transac_email: {e}")
            raise MailDeliveryError() from e


def build_mailer(settings: Settings | None = None) -> Mailer:
    settings = settings or get_settings()
    if settings.brevo_api_key:
        return BrevoMailer(settings)
    logger.warning("BREVO_API_KEY is not set; verification codes will only be logged.")
    return LogMailer()
