"""
YourTales Backend - EmailService Unit Tests
============================================

What:  Tests OTP email delivery with smtplib mocked out.

What we test:
    ✅ Unconfigured SMTP logs the code instead of sending
    ✅ Successful send uses STARTTLS + login
    ✅ Transient connection errors are retried, then given up on
    ✅ Non-transient SMTP errors are not retried and never raise
"""

import logging
import smtplib
from unittest.mock import MagicMock, patch

import pytest

from yourtales.config import settings
from yourtales.services.email_service import EmailService


@pytest.fixture
def smtp_settings():
    with patch.object(settings, "smtp_host", "smtp.example.com"), \
            patch.object(settings, "smtp_user", "mailer@example.com"), \
            patch.object(settings, "smtp_password", "app-password"), \
            patch.object(settings, "smtp_from", "YourTales <no-reply@example.com>"), \
            patch.object(settings, "smtp_use_tls", True):
        yield


@pytest.fixture
def no_backoff():
    # tenacity sleeps through time.sleep between attempts
    with patch("tenacity.nap.time.sleep"):
        yield


class TestBuildMessage:

    def setup_method(self):
        self.service = EmailService()

    def test_verify_message(self, smtp_settings):
        msg = self.service.build_otp_message("reader@example.com", "12345", "verify")

        assert msg["To"] == "reader@example.com"
        assert msg["From"] == "YourTales <no-reply@example.com>"
        assert "verification" in msg["Subject"]
        assert "12345" in msg.get_content()

    def test_reset_message(self, smtp_settings):
        msg = self.service.build_otp_message("reader@example.com", "54321", "reset")
        assert "password reset" in msg["Subject"]


class TestSendOtpEmail:

    def setup_method(self):
        self.service = EmailService()

    def test_not_configured_logs_code(self, caplog):
        with patch.object(settings, "smtp_host", ""), \
                patch("yourtales.services.email_service.smtplib.SMTP") as mock_smtp:
            with caplog.at_level(logging.WARNING, logger="yourtales.services.email_service"):
                sent = self.service.send_otp_email("reader@example.com", "12345")

        assert sent is False
        mock_smtp.assert_not_called()
        assert "12345" in caplog.text

    def test_successful_send(self, smtp_settings):
        with patch("yourtales.services.email_service.smtplib.SMTP") as mock_smtp:
            server = mock_smtp.return_value.__enter__.return_value
            sent = self.service.send_otp_email("reader@example.com", "12345")

        assert sent is True
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer@example.com", "app-password")
        server.send_message.assert_called_once()
        assert server.send_message.call_args[0][0]["To"] == "reader@example.com"

    def test_transient_error_retried_then_given_up(self, smtp_settings, no_backoff):
        with patch("yourtales.services.email_service.smtplib.SMTP") as mock_smtp:
            mock_smtp.side_effect = smtplib.SMTPConnectError(421, "try later")
            sent = self.service.send_otp_email("reader@example.com", "12345")

        assert sent is False
        assert mock_smtp.call_count == settings.smtp_retry_attempts

    def test_transient_error_then_success(self, smtp_settings, no_backoff):
        with patch("yourtales.services.email_service.smtplib.SMTP") as mock_smtp:
            mock_smtp.side_effect = [ConnectionRefusedError("refused"), MagicMock()]
            sent = self.service.send_otp_email("reader@example.com", "12345")

        assert sent is True
        assert mock_smtp.call_count == 2

    def test_auth_error_not_retried(self, smtp_settings, no_backoff):
        with patch("yourtales.services.email_service.smtplib.SMTP") as mock_smtp:
            server = mock_smtp.return_value.__enter__.return_value
            server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad credentials")
            sent = self.service.send_otp_email("reader@example.com", "12345")

        assert sent is False
        assert mock_smtp.call_count == 1
