"""
YourTales Backend - Email Service (OTP Delivery)
=================================================

What:  Sends one-time codes for account verification and password reset.
How:   Plain SMTP via smtplib (STARTTLS + login when configured). Routes
       schedule send_otp_email() as a FastAPI background task, so delivery
       happens after the response and never delays or fails a request.

Failure handling:
    - SMTP not configured → the code is logged at WARNING (local development)
    - Connection-level errors (refused, timeout, server dropped) → retried by
      tenacity up to SMTP_RETRY_ATTEMPTS times with a short backoff
    - Anything still failing → logged at ERROR, swallowed
"""

import logging
import smtplib
import socket
from email.message import EmailMessage

from tenacity import (
    RetryError,
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from yourtales.config import settings

logger = logging.getLogger(__name__)

# Errors that say nothing about the message itself; worth another attempt
TRANSIENT_SMTP_ERRORS = (
    smtplib.SMTPConnectError,
    smtplib.SMTPServerDisconnected,
    ConnectionError,
    socket.timeout,
    TimeoutError,
)

OTP_SUBJECTS = {
    "verify": "Your YourTales verification code",
    "reset": "Your YourTales password reset code",
}


class EmailService:
    """SMTP sender for OTP messages."""

    def build_otp_message(self, to_email: str, otp: str, purpose: str = "verify") -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = OTP_SUBJECTS.get(purpose, OTP_SUBJECTS["verify"])
        msg["From"] = settings.smtp_sender
        msg["To"] = to_email
        msg.set_content(
            f"Your one-time code is: {otp}\n\n"
            f"It expires in {settings.otp_ttl_minutes} minutes. "
            "If you did not request it, you can ignore this email.\n"
        )
        return msg

    def send_otp_email(self, to_email: str, otp: str, purpose: str = "verify") -> bool:
        """
        Deliver an OTP email. Returns True when the SMTP server accepted it.

        Runs synchronously; FastAPI executes sync background tasks in its
        threadpool, so the event loop is not blocked.
        """
        if not settings.smtp_configured:
            logger.warning(
                "SMTP not configured; %s code for %s is %s", purpose, to_email, otp
            )
            return False

        msg = self.build_otp_message(to_email, otp, purpose)
        try:
            self._send_with_retry(msg)
            logger.info("Sent %s code email to %s", purpose, to_email)
            return True
        except RetryError as e:
            logger.error(
                "Giving up on %s code email to %s: %s",
                purpose,
                to_email,
                str(e.last_attempt.exception()) if e.last_attempt else "Unknown error",
            )
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send %s code email to %s: %s", purpose, to_email, str(e))
        return False

    @retry(
        retry=retry_if_exception_type(TRANSIENT_SMTP_ERRORS),
        stop=stop_after_attempt(settings.smtp_retry_attempts),
        wait=wait_exponential_jitter(initial=0.5, max=4, jitter=0.5),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
    def _send_with_retry(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout) as smtp:
            if settings.smtp_use_tls:
                smtp.starttls()
            if settings.smtp_user:
                smtp.login(settings.smtp_user, settings.smtp_password)
            smtp.send_message(msg)


# ── Singleton Instance ────────────────────────────────────────────────────
email_service = EmailService()
