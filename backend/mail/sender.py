from __future__ import annotations

import logging

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import From, Mail

from .config import DEFAULT_MAIL_CONFIG, MailConfig

logger = logging.getLogger(__name__)

OTP_SUBJECT = "Password Reset OTP"


class MailDeliveryError(RuntimeError):
    """The email could not be handed to the mail provider."""


def send_otp_email(
    to_email: str,
    otp_code: str,
    ttl_minutes: int = 5,
    config: MailConfig = DEFAULT_MAIL_CONFIG,
) -> None:
    """Email a password-reset OTP. Raises ``MailDeliveryError`` on failure."""
    if not config.api_key:
        raise MailDeliveryError("Email service not configured")

    message = Mail(
        from_email=From(config.from_email, config.from_name),
        to_emails=to_email,
        subject=OTP_SUBJECT,
        plain_text_content=(
            f"Your OTP code is {otp_code}. It will expire in {ttl_minutes} minutes."
        ),
    )

    try:
        response = SendGridAPIClient(config.api_key).send(message)
    except Exception as exc:
        raise MailDeliveryError(f"Failed to send OTP email: {exc}") from exc

    logger.info("OTP email sent to %s (status %s)", to_email, response.status_code)
