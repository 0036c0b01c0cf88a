"""Outbound email for activation and password reset links."""

import asyncio
import logging
import smtplib
from abc import ABC, abstractmethod
from email.message import EmailMessage
from typing import Optional

from .common.logging_config import mask_token
from .common.url_builder import build_client_link
from .errors import EmailDeliveryError


ACTIVATION_SUBJECT = "User Account Activation Request"
RESET_SUBJECT = "Password Reset Request"

BUTTON_STYLE = (
    "display: inline-block; padding: 10px 20px; background-color: #007bff; "
    "color: #fff; text-decoration: none; border-radius: 5px;"
)


def activation_email_body(link: str) -> str:
    return (
        "<p>This email is to verify your email account.</p>"
        "<p>Please click on the following button to activate your account.</p>"
        f'<a href="{link}" style="{BUTTON_STYLE}">Activate Account</a>'
    )


def reset_email_body(link: str) -> str:
    return (
        "<p>You are receiving this email because you (or someone else) has requested "
        "a password reset for your account.</p>"
        "<p>Please click on the following button to reset your password.</p>"
        f'<a href="{link}" style="{BUTTON_STYLE}">Reset Password</a>'
        "<p>If you did not request this, please ignore this mail, and your password "
        "will remain unchanged.</p>"
    )


class EmailNotifier(ABC):
    """Sends account emails. Links point into the client app."""

    def __init__(self, client_url: str, logger: Optional[logging.Logger] = None):
        self.client_url = client_url
        self.logger = logger or logging.getLogger(__name__)

    def activation_link(self, token: str) -> str:
        return build_client_link(self.client_url, "activation", token)

    def reset_link(self, token: str) -> str:
        return build_client_link(self.client_url, "reset-password", token)

    async def send_activation_email(self, to_address: str, token: str) -> None:
        """Send the account activation link."""
        link = self.activation_link(token)
        await self.send(to_address, ACTIVATION_SUBJECT, activation_email_body(link), link)

    async def send_password_reset_email(self, to_address: str, token: str) -> None:
        """Send the password reset link."""
        link = self.reset_link(token)
        await self.send(to_address, RESET_SUBJECT, reset_email_body(link), link)

    @abstractmethod
    async def send(self, to_address: str, subject: str, html_body: str, link: str) -> None:
        """Deliver one message. Raises ``EmailDeliveryError`` on failure."""
        pass


class SMTPEmailNotifier(EmailNotifier):
    """Deliver mail through an SMTP server with STARTTLS and login."""

    def __init__(
        self,
        client_url: str,
        host: str,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        use_tls: bool = True,
        timeout_seconds: int = 30,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(client_url, logger)
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.use_tls = use_tls
        self.timeout_seconds = timeout_seconds

        if not self.sender:
            raise ValueError("SMTP sender address is required (smtp_sender or smtp_user)")

    def _build_message(self, to_address: str, subject: str, html_body: str, link: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to_address
        msg.set_content(f"Open this link to continue: {link}")
        msg.add_alternative(html_body, subtype="html")
        return msg

    def _send_blocking(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout_seconds) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(msg)

    async def send(self, to_address: str, subject: str, html_body: str, link: str) -> None:
        msg = self._build_message(to_address, subject, html_body, link)
        try:
            # smtplib blocks; the request still waits for the result
            await asyncio.to_thread(self._send_blocking, msg)
        except (smtplib.SMTPException, OSError) as e:
            self.logger.error(f"Failed to send '{subject}' to {to_address}: {e}")
            raise EmailDeliveryError(f"Error sending email to {to_address}") from e

        self.logger.info(f"Sent '{subject}' to {to_address}")


class LoggingEmailNotifier(EmailNotifier):
    """Log messages instead of sending them, for setups without SMTP."""

    async def send(self, to_address: str, subject: str, html_body: str, link: str) -> None:
        token = link.rsplit("/", 1)[-1]
        self.logger.warning(
            f"SMTP not configured; '{subject}' for {to_address} not sent "
            f"(link {link[: -len(token)]}{mask_token(token)})"
        )
        self.logger.debug(f"Unsent link for {to_address}: {link}")


def create_notifier(config, logger: Optional[logging.Logger] = None) -> EmailNotifier:
    """Build the notifier the configuration asks for."""
    if not config.smtp_host:
        return LoggingEmailNotifier(config.client_url, logger=logger)

    return SMTPEmailNotifier(
        client_url=config.client_url,
        host=config.smtp_host,
        port=config.smtp_port,
        username=config.smtp_user,
        password=config.smtp_password,
        sender=config.smtp_sender,
        use_tls=config.smtp_use_tls,
        timeout_seconds=config.smtp_timeout_seconds,
        logger=logger,
    )
