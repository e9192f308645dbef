"""Outbound email over SMTP.

The transport is resolved from settings: an explicit host and port when both
are set, otherwise a well-known provider named by ``email_service``. Each
send is a single attempt; failures are raised as categorized
TransportError subclasses.
"""

import smtplib
import socket
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Optional, Protocol

from billing_backend.app.core.exceptions import (
    ConfigurationError,
    EmailAuthError,
    EmailConnectionRefusedError,
    EmailSocketError,
    EmailTimeoutError,
    TransportError,
)
from billing_backend.app.core.logging import get_logger
from billing_backend.app.core.settings import Settings, get_settings

logger = get_logger(__name__)

FALLBACK_TEXT = "Please view this email in HTML format."

KNOWN_SERVICES = {
    "gmail": ("smtp.gmail.com", 587),
    "outlook": ("smtp.office365.com", 587),
    "hotmail": ("smtp.office365.com", 587),
    "office365": ("smtp.office365.com", 587),
    "yahoo": ("smtp.mail.yahoo.com", 465),
    "zoho": ("smtp.zoho.com", 465),
}


@dataclass
class OutgoingEmail:
    to: str
    subject: str
    html_body: str
    text_body: Optional[str] = None


class Mailer(Protocol):
    def send(self, email: OutgoingEmail) -> str: ...


@dataclass(frozen=True)
class SmtpTarget:
    host: str
    port: int
    use_ssl: bool


def resolve_target(settings: Settings) -> SmtpTarget:
    if settings.email_host and settings.email_port:
        port = int(settings.email_port)
        return SmtpTarget(settings.email_host, port, settings.email_secure or port == 465)

    service = (settings.email_service or "gmail").lower()
    if service not in KNOWN_SERVICES:
        raise ConfigurationError(f"Unknown email service: {service}", missing=["EMAIL_HOST", "EMAIL_PORT"])
    host, port = KNOWN_SERVICES[service]
    return SmtpTarget(host, port, port == 465)


def build_message(email: OutgoingEmail, sender: str) -> EmailMessage:
    message = EmailMessage()
    message["From"] = sender
    message["To"] = email.to
    message["Subject"] = email.subject
    message["Message-ID"] = make_msgid(domain=sender.split("@")[-1] if "@" in sender else None)
    message.set_content(email.text_body or FALLBACK_TEXT)
    message.add_alternative(email.html_body, subtype="html")
    return message


def categorize_error(exc: Exception) -> TransportError:
    if isinstance(exc, smtplib.SMTPAuthenticationError):
        return EmailAuthError()
    if isinstance(exc, (socket.timeout, TimeoutError)):
        return EmailTimeoutError()
    if isinstance(exc, ConnectionRefusedError):
        return EmailConnectionRefusedError()
    if isinstance(exc, (smtplib.SMTPServerDisconnected, smtplib.SMTPConnectError, ssl.SSLError, OSError)):
        return EmailSocketError()
    return TransportError(str(exc) or "Failed to send email")


class SmtpMailer:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def _connect(self, target: SmtpTarget) -> smtplib.SMTP:
        timeout = self.settings.email_timeout_seconds
        if target.use_ssl:
            return smtplib.SMTP_SSL(target.host, target.port, timeout=timeout, context=ssl.create_default_context())
        client = smtplib.SMTP(target.host, target.port, timeout=timeout)
        client.starttls(context=ssl.create_default_context())
        return client

    def send(self, email: OutgoingEmail) -> str:
        if not self.settings.email_configured:
            raise ConfigurationError(
                "Email service not configured. Please set EMAIL_USER and EMAIL_PASS environment variables.",
                missing=["EMAIL_USER", "EMAIL_PASS"],
            )
        target = resolve_target(self.settings)
        message = build_message(email, self.settings.email_user)

        try:
            with self._connect(target) as client:
                client.login(self.settings.email_user, self.settings.email_pass)
                client.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            error = categorize_error(exc)
            logger.error("email_send_failed", to=email.to, host=target.host, error_code=error.code, error=str(exc))
            raise error from exc

        logger.info("email_sent", to=email.to, message_id=message["Message-ID"])
        return message["Message-ID"]


def get_mailer() -> Mailer:
    return SmtpMailer()
