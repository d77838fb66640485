"""
Email Channels — deliver a single rendered notification.

- SmtpEmailSender: send via SMTP (async, STARTTLS or implicit TLS on 465)
- LogEmailSender: log the message instead of sending (no SMTP configured)

Senders raise DispatchError on any delivery failure; the caller decides
whether that failure is fatal.
"""

from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Optional, Protocol

import aiosmtplib
import structlog

from neowatch.alerting.schemas import ThreatSummary
from neowatch.config import Settings
from neowatch.errors import DispatchError

logger = structlog.get_logger(__name__)

SMTPS_PORT = 465


class EmailSender(Protocol):
    """Protocol for notification senders."""

    async def send(
        self, to_address: str, display_name: str, summary: ThreatSummary
    ) -> None:
        """Deliver one message. Raises DispatchError on failure."""
        ...


class SmtpEmailSender:
    """
    Dispatch notifications via SMTP.

    Constructs a plain-text email from the rendered summary.
    """

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str = "",
        password: str = "",
        from_email: str = "alerts@neowatch.io",
        use_tls: Optional[bool] = None,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email
        # 465 is implicit TLS (SMTPS); every other port upgrades via STARTTLS
        self.use_tls = port == SMTPS_PORT if use_tls is None else use_tls
        self.start_tls = not self.use_tls

    async def send(
        self, to_address: str, display_name: str, summary: ThreatSummary
    ) -> None:
        if not to_address:
            raise DispatchError("No recipient email")
        if not self.host:
            raise DispatchError("No SMTP host configured")

        msg = MIMEText(summary.body)
        msg["Subject"] = summary.subject
        msg["From"] = self.from_email
        msg["To"] = formataddr((display_name, to_address)) if display_name else to_address

        try:
            await aiosmtplib.send(
                msg,
                recipients=[to_address],
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                use_tls=self.use_tls,
                start_tls=self.start_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(
                "email_dispatch_error",
                to=to_address,
                threat_id=summary.threat_id,
                error=str(e),
            )
            raise DispatchError(str(e)) from e

        logger.info("email_alert_sent", to=to_address, threat_id=summary.threat_id)


class LogEmailSender:
    """Writes notifications to the log. Always succeeds."""

    async def send(
        self, to_address: str, display_name: str, summary: ThreatSummary
    ) -> None:
        logger.info(
            "email_alert_logged",
            to=to_address,
            display_name=display_name,
            subject=summary.subject,
            threat_id=summary.threat_id,
        )


def build_email_sender(settings: Settings) -> EmailSender:
    """SMTP when a host is configured, log-only otherwise."""
    if not settings.alert_smtp_host:
        logger.warning("smtp_not_configured", msg="Notifications will only be logged")
        return LogEmailSender()
    return SmtpEmailSender(
        host=settings.alert_smtp_host,
        port=settings.alert_smtp_port,
        username=settings.alert_smtp_user,
        password=settings.alert_smtp_password,
        from_email=settings.alert_from_email,
    )
