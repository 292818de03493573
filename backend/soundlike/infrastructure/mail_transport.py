"""SMTP Mail Transport — sends HTML notification mails.

Invariants:
    - Unconfigured transport (missing host/port/user/password) is a no-op that logs once
      per send, so development environments never fail on mail
    - Every delivery failure is mapped to MailDeliveryError; callers log and move on
    - smtplib is blocking: each send runs in asyncio.to_thread
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

from soundlike.core.errors import MailDeliveryError

logger = logging.getLogger(__name__)


class SmtpMailTransport:
    """MailTransport over SMTP with opportunistic STARTTLS."""

    def __init__(
        self,
        host: str = "",
        port: int | None = None,
        user: str = "",
        password: str = "",
        sender: str = "",
        timeout_seconds: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender or user
        self.timeout_seconds = timeout_seconds

    @property
    def configured(self) -> bool:
        return bool(self.host and self.port and self.user and self.password)

    async def send(self, to: str, subject: str, html_body: str) -> None:
        if not self.configured:
            logger.info("SMTP configuration missing, skipping email sending.")
            return
        message = self._build(to, subject, html_body)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            raise MailDeliveryError(str(e), to) from e

    def _build(self, to: str, subject: str, html_body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = formataddr(("SoundLike", self.sender))
        message["To"] = to
        message["Subject"] = subject
        message.set_content(html_body, subtype="html", charset="utf-8")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        if self.port == 465:
            client = smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout_seconds)
        else:
            client = smtplib.SMTP(self.host, self.port, timeout=self.timeout_seconds)
        with client:
            client.ehlo()
            if self.port != 465 and client.has_extn("starttls"):
                client.starttls()
                client.ehlo()
            client.login(self.user, self.password)
            client.send_message(message)
