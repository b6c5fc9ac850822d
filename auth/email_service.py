"""Email service for sending passcodes and welcome messages."""

import smtplib
import logging
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional

from .errors import DeliveryError

logger = logging.getLogger(__name__)


class EmailService:
    """Sends notekeep emails over SMTP, with a console fallback when unconfigured."""

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: int = 587,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
        smtp_from_email: Optional[str] = None,
        smtp_timeout: float = 10.0,
        frontend_url: str = "http://localhost:3000",
        otp_ttl_minutes: int = 10,
    ):
        """Initialize email service."""
        self._smtp_host = smtp_host
        self._smtp_port = smtp_port
        self._smtp_user = smtp_user
        self._smtp_password = smtp_password
        self._smtp_from_email = smtp_from_email or smtp_user
        self._smtp_timeout = smtp_timeout
        self._frontend_url = frontend_url
        self._otp_ttl_minutes = otp_ttl_minutes

    @property
    def is_configured(self) -> bool:
        """Check if SMTP is properly configured."""
        return bool(
            self._smtp_host
            and self._smtp_user
            and self._smtp_password
            and self._smtp_from_email
        )

    def _send(self, email: str, subject: str, text: str, html: str) -> None:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self._smtp_from_email
        msg["To"] = email
        msg.attach(MIMEText(text, "plain"))
        msg.attach(MIMEText(html, "html"))

        with smtplib.SMTP(
            self._smtp_host, self._smtp_port, timeout=self._smtp_timeout
        ) as server:
            server.starttls()
            server.login(self._smtp_user, self._smtp_password)
            server.sendmail(self._smtp_from_email, email, msg.as_string())

    def send_passcode(self, email: str, passcode: str, name: str) -> None:
        """
        Send a one-time passcode to email.
        Raises DeliveryError if the SMTP transport fails.
        Falls back to console output if SMTP not configured.
        """
        if not self.is_configured:
            print(f"\n{'='*50}")
            print(f"PASSCODE for {email}")
            print(f"Code: {passcode}")
            print(f"{'='*50}\n")
            logger.info(f"Passcode for {email}: {passcode} (console fallback)")
            return

        text = f"""Hello {name}!

Your notekeep verification code is: {passcode}

This code will expire in {self._otp_ttl_minutes} minutes.

If you didn't request this code, you can safely ignore this email.
"""

        html = f"""
<!DOCTYPE html>
<html>
<head>
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; }}
        .container {{ max-width: 400px; margin: 40px auto; padding: 20px; }}
        .code {{ font-size: 32px; font-weight: bold; letter-spacing: 4px;
                 color: #333; background: #f5f5f5; padding: 16px;
                 text-align: center; border-radius: 8px; margin: 20px 0; }}
        .footer {{ color: #666; font-size: 12px; margin-top: 30px; }}
    </style>
</head>
<body>
    <div class="container">
        <h2>Hello {name}!</h2>
        <p>Enter this code to verify your email:</p>
        <div class="code">{passcode}</div>
        <p>This code will expire in {self._otp_ttl_minutes} minutes.</p>
        <p class="footer">If you didn't request this code, you can safely ignore this email.</p>
    </div>
</body>
</html>
"""

        try:
            self._send(email, "Your notekeep verification code", text, html)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send passcode email to {email}: {e}")
            raise DeliveryError(f"Could not deliver passcode to {email}") from e

        logger.info(f"Passcode email sent to {email}")

    def send_welcome(self, email: str, name: str) -> None:
        """Send a welcome email. Never raises."""
        if not self.is_configured:
            logger.info(f"Welcome email for {email} skipped (SMTP not configured)")
            return

        text = f"""Hello {name}!

Welcome to notekeep! Your account has been created and verified.
Start taking notes at {self._frontend_url}
"""

        html = f"""
<!DOCTYPE html>
<html>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;">
    <div style="max-width: 400px; margin: 40px auto; padding: 20px;">
        <h2>Hello {name}!</h2>
        <p>Welcome to notekeep! Your account has been created and verified.</p>
        <p><a href="{self._frontend_url}">Start taking notes</a></p>
    </div>
</body>
</html>
"""

        try:
            self._send(email, "Welcome to notekeep!", text, html)
            logger.info(f"Welcome email sent to {email}")
        except Exception as e:
            logger.error(f"Failed to send welcome email to {email}: {e}")
