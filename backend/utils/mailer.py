# backend/utils/mailer.py
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from urllib.parse import urlencode

from fastapi import Depends

from config import Settings, get_settings

logger = logging.getLogger(__name__)


def redact_email(email: str) -> str:
    if "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


class EmailService:
    """SMTP sender for account emails; only logs when SMTP is not configured."""

    def __init__(self, settings: Settings):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_email = settings.MAIL_FROM or settings.SMTP_USER
        self.origin = settings.FRONTEND_URL.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp_host and self.from_email)

    def send(self, to: str, subject: str, html: str) -> bool:
        """Deliver one message. Failures are logged and reported as False."""
        if not self.is_configured:
            logger.info("Email to %s not sent (SMTP not configured): %s", redact_email(to), subject)
            return True

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to
        msg.attach(MIMEText(html, "html"))

        try:
            context = ssl.create_default_context()
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30) as server:
                server.starttls(context=context)
                if self.smtp_user and self.smtp_password:
                    server.login(self.smtp_user, self.smtp_password)
                server.sendmail(self.from_email, to, msg.as_string())
        except (smtplib.SMTPException, ssl.SSLError, OSError) as e:
            logger.error("Email to %s failed: %s: %s", redact_email(to), type(e).__name__, e)
            return False

        logger.info("Email sent to %s: %s", redact_email(to), subject)
        return True

    def send_verification_email(self, name: str, email: str, verification_token: str) -> bool:
        query = urlencode({"token": verification_token, "email": email})
        verify_url = f"{self.origin}/user/verify-email?{query}"
        html = (
            f"<h4>Hello, {name}</h4>"
            f"<p>Please confirm your email by clicking on the following link: "
            f'<a href="{verify_url}">Verify Email</a></p>'
        )
        return self.send(email, "Email Confirmation", html)

    def send_reset_password_email(self, name: str, email: str, token: str) -> bool:
        query = urlencode({"token": token, "email": email})
        reset_url = f"{self.origin}/user/reset-password?{query}"
        html = (
            f"<h4>Hello, {name}</h4>"
            f"<p>Please reset your password by clicking on the following link: "
            f'<a href="{reset_url}">Reset Password</a></p>'
        )
        return self.send(email, "Reset Password", html)


def get_email_service(settings: Settings = Depends(get_settings)) -> EmailService:
    return EmailService(settings)
