"""
SMTP delivery.

When SMTP_HOST is not configured (local development) messages are logged
instead of sent and reported as delivered.

Message and transport failures are returned as
`EmailResult(success=False, ...)`; callers record the outcome instead of
handling exceptions.
"""

from __future__ import annotations

import asyncio
import logging
import smtplib
import time
from dataclasses import dataclass, field
from email.message import EmailMessage
from email.utils import make_msgid

from . import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SendEmailOptions:
    to: list[str]
    subject: str
    text: str
    cc: list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)
    html: str | None = None


@dataclass(frozen=True)
class EmailResult:
    success: bool
    message_id: str | None = None
    response: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class SmtpSettings:
    host: str
    port: int
    secure: bool
    user: str
    password: str
    sender: str
    timeout_s: float = 30.0


def smtp_settings() -> SmtpSettings | None:
    host = config.env_str("SMTP_HOST", "")
    if not host:
        return None
    user = config.env_str("SMTP_USER", "")
    return SmtpSettings(
        host=host,
        port=config.env_int("SMTP_PORT", 587),
        # true for 465, false for STARTTLS ports
        secure=config.env_bool("SMTP_SECURE", False),
        user=user,
        password=config.env_str("SMTP_PASSWORD", ""),
        sender=config.env_str("SMTP_FROM", user),
    )


def build_message(options: SendEmailOptions, *, sender: str, message_id: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = ", ".join(options.to)
    if options.cc:
        msg["Cc"] = ", ".join(options.cc)
    msg["Subject"] = options.subject
    msg["Message-ID"] = message_id
    msg.set_content(options.text)
    if options.html:
        msg.add_alternative(options.html, subtype="html")
    return msg


def _deliver(settings: SmtpSettings, msg: EmailMessage, recipients: list[str]) -> str:
    smtp_cls = smtplib.SMTP_SSL if settings.secure else smtplib.SMTP
    with smtp_cls(settings.host, settings.port, timeout=settings.timeout_s) as smtp:
        smtp.ehlo()
        if not settings.secure and smtp.has_extn("starttls"):
            smtp.starttls()
            smtp.ehlo()
        if settings.user:
            smtp.login(settings.user, settings.password)
        refused = smtp.send_message(msg, to_addrs=recipients)
    if refused:
        return f"Accepted with refused recipients: {', '.join(sorted(refused))}"
    return "250 Message accepted"


async def send_email(options: SendEmailOptions) -> EmailResult:
    settings = smtp_settings()

    if settings is None:
        logger.info(
            "email_not_sent smtp_configured=false to=%s subject=%r body_preview=%r",
            ", ".join(options.to),
            options.subject,
            options.text[:100],
        )
        return EmailResult(
            success=True,
            message_id=f"dev-{int(time.time() * 1000)}",
            response="Email logged (SMTP not configured)",
        )

    sender = settings.sender or settings.user
    domain = sender.rsplit("@", 1)[-1] if "@" in sender else None
    message_id = make_msgid(domain=domain)
    recipients = [*options.to, *options.cc, *options.bcc]

    try:
        msg = build_message(options, sender=sender, message_id=message_id)
    except ValueError as exc:
        # Header values with line breaks are refused by the email package.
        logger.warning("email_message_invalid to=%s error=%s", ", ".join(options.to), exc)
        return EmailResult(success=False, error=str(exc))

    try:
        response = await asyncio.to_thread(_deliver, settings, msg, recipients)
    except (smtplib.SMTPException, OSError, ValueError) as exc:
        logger.exception("email_send_failed to=%s", ", ".join(options.to))
        return EmailResult(success=False, error=str(exc) or type(exc).__name__)

    return EmailResult(success=True, message_id=message_id, response=response)
