"""Outbound interview notifications."""
from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional, Protocol

from config.settings import Settings
from interview.errors import UpstreamDeliveryFailure


logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def send(self, to: str, subject: str, body: str) -> None: ...


class LogNotifier:
    """Logs notifications instead of delivering them."""

    def send(self, to: str, subject: str, body: str) -> None:
        logger.info("Notification to=%s subject=%s\n%s", to, subject, body)


class SmtpNotifier:
    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        *,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 10.0,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._timeout = timeout

    def send(self, to: str, subject: str, body: str) -> None:
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
                smtp.starttls()
                if self._username and self._password:
                    smtp.login(self._username, self._password)
                smtp.send_message(message)
        except (OSError, smtplib.SMTPException) as exc:
            raise UpstreamDeliveryFailure(f"SMTP delivery to {to} failed: {exc}") from exc


def notifier_from_settings(settings: Settings) -> Notifier:
    if not settings.SMTP_HOST:
        return LogNotifier()
    return SmtpNotifier(
        settings.SMTP_HOST,
        settings.SMTP_PORT,
        settings.SMTP_SENDER,
        username=settings.SMTP_USERNAME,
        password=settings.SMTP_PASSWORD,
    )


__all__ = ["LogNotifier", "Notifier", "SmtpNotifier", "notifier_from_settings"]
