# File: accounts_api/services/notifications.py

"""
Transactional email.

Delivery is best-effort: callers get a small result dict back that can be
attached to an API response, and failures are logged instead of raised.
"""

import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

from accounts_api.core.config import Settings

logger = logging.getLogger(__name__)


WELCOME_SUBJECT = "🎉 Welcome to Urban Eats!"
WELCOME_TEMPLATE = """Hi {user_name},

Welcome to Urban Eats! 🍽️
We're thrilled to have you join our community of food lovers.

Here's what you can do right away:
👉 Explore delicious meals from top restaurants
👉 Save your favorite dishes
👉 Track your orders in real-time

We're here to make every bite memorable.

Enjoy your culinary journey!


The Urban Eats Team 🍴"""

OTP_SUBJECT = "Your Urban Eats verification code"
OTP_TEMPLATE = """Hi,

Your Urban Eats verification code is: {code}

It expires in {minutes} minutes. If you did not try to sign up, you can
ignore this email.

The Urban Eats Team 🍴"""


class Mailer(Protocol):
    def send(self, to: str, subject: str, body: str) -> None: ...


class SMTPMailer:
    """Sends plain-text mail through an SMTP relay, one connection per message."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _connect(self) -> smtplib.SMTP:
        conn = smtplib.SMTP(
            host=self.settings.smtp_host,
            port=self.settings.smtp_port,
            timeout=self.settings.smtp_timeout,
        )
        if self.settings.smtp_use_tls:
            conn.starttls()
        if self.settings.smtp_username and self.settings.smtp_password:
            conn.login(self.settings.smtp_username, self.settings.smtp_password)
        return conn

    def send(self, to: str, subject: str, body: str) -> None:
        message = EmailMessage()
        message["From"] = self.settings.mail_from
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        with self._connect() as conn:
            conn.send_message(message)


class Notifier:
    def __init__(self, mailer: Mailer, settings: Settings):
        self.mailer = mailer
        self.settings = settings

    def _deliver(self, to: str, subject: str, body: str) -> dict:
        try:
            self.mailer.send(to, subject, body)
        except (smtplib.SMTPException, OSError) as exc:
            logger.warning("Email delivery to %s failed: %s", to, exc)
            return {"delivered": False, "detail": "Email could not be delivered"}
        logger.info("Email %r delivered to %s", subject, to)
        return {"delivered": True, "detail": "Email sent"}

    def send_welcome(self, email: str, user_name: str) -> dict:
        return self._deliver(email, WELCOME_SUBJECT, WELCOME_TEMPLATE.format(user_name=user_name))

    def send_otp(self, email: str, code: str) -> dict:
        minutes = max(1, self.settings.otp_max_age_seconds // 60)
        return self._deliver(email, OTP_SUBJECT, OTP_TEMPLATE.format(code=code, minutes=minutes))
