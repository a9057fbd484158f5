"""Mail transports used to deliver transactional email."""

from __future__ import annotations

from email.message import EmailMessage
from typing import Protocol

import aiosmtplib

from ..config import settings
from ..logging import get_logger

logger = get_logger(__name__)


class MailDeliveryError(Exception):
    """Raised when a transport fails to hand a message to the mail server."""

    pass


class MailTransport(Protocol):
    """Transport-agnostic mail interface."""

    async def send_mail(self, *, from_: str, to: str, subject: str, html: str) -> None:
        """
        Deliver one HTML message.

        Raises:
            MailDeliveryError: If the message could not be handed off
        """
        ...


class SMTPMailTransport:
    """Deliver mail through an SMTP server using aiosmtplib."""

    def __init__(
        self,
        hostname: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = False,
        start_tls: bool = True,
        timeout: float = 30.0,
    ):
        self.hostname = hostname
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        # Implicit TLS and STARTTLS are mutually exclusive
        self.start_tls = start_tls and not use_tls
        self.timeout = timeout

    @staticmethod
    def build_message(*, from_: str, to: str, subject: str, html: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = from_
        message["To"] = to
        message["Subject"] = subject
        message.set_content(html, subtype="html")
        return message

    async def send_mail(self, *, from_: str, to: str, subject: str, html: str) -> None:
        message = self.build_message(from_=from_, to=to, subject=subject, html=html)
        try:
            await aiosmtplib.send(
                message,
                hostname=self.hostname,
                port=self.port,
                username=self.username,
                password=self.password,
                use_tls=self.use_tls,
                start_tls=self.start_tls,
                timeout=self.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            raise MailDeliveryError(f"SMTP delivery to {to} failed: {e}") from e

        logger.info("Mail sent", to=to, subject=subject, smtp_host=self.hostname)


class NullMailTransport:
    """Drop messages when no SMTP host is configured, logging who they were for.

    Outside development a dropped message is a misconfiguration, so it is
    logged as a warning.
    """

    async def send_mail(self, *, from_: str, to: str, subject: str, html: str) -> None:
        log = logger.info if settings.environment == "development" else logger.warning
        log(
            "Mail not sent, no SMTP host configured",
            to=to,
            subject=subject,
            environment=settings.environment,
        )


_transport: MailTransport | None = None


def get_mail_transport() -> MailTransport:
    """Return the process-wide transport, building it from settings on first use."""
    global _transport
    if _transport is None:
        if settings.smtp_host:
            _transport = SMTPMailTransport(
                hostname=settings.smtp_host,
                port=settings.smtp_port,
                username=settings.smtp_username,
                password=settings.smtp_password,
                use_tls=settings.smtp_use_tls,
                start_tls=settings.smtp_start_tls,
                timeout=settings.smtp_timeout,
            )
        else:
            _transport = NullMailTransport()
    return _transport


def set_mail_transport(transport: MailTransport | None) -> None:
    """Replace the process-wide transport. Pass None to rebuild from settings."""
    global _transport
    _transport = transport
