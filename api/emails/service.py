"""
Email sending flow.

1) insert a PENDING record (sender, recipients, client ip / user agent)
2) hand the message to the SMTP transport
3) record the outcome: SENT (sent_at, message id, server response) or
   FAILED (failure reason)

The record is persisted whichever way delivery goes.
"""

from __future__ import annotations

import logging

from auth.service import ClientInfo
from core import mailer

from . import repository, schemas

logger = logging.getLogger(__name__)


async def send(payload: schemas.SendEmailRequest, *, sender: dict, client: ClientInfo) -> tuple[dict, bool]:
    email_id = await repository.create_pending_email(
        sent_by=sender["id"],
        to=payload.to,
        cc=payload.cc,
        bcc=payload.bcc,
        subject=payload.subject,
        body=payload.body,
        body_html=payload.body_html,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )

    options = mailer.SendEmailOptions(
        to=payload.to,
        cc=payload.cc,
        bcc=payload.bcc,
        subject=payload.subject,
        text=payload.body,
        html=payload.body_html,
    )
    try:
        result = await mailer.send_email(options)
    except Exception as exc:
        # The PENDING row must always be resolved.
        logger.exception("email_send_crashed id=%s", email_id)
        result = mailer.EmailResult(success=False, error=str(exc) or type(exc).__name__)

    if result.success:
        await repository.mark_sent(email_id, message_id=result.message_id, smtp_response=result.response)
        logger.info("email_sent id=%s message_id=%s", email_id, result.message_id)
    else:
        await repository.mark_failed(email_id, failure_reason=result.error)
        logger.warning("email_failed id=%s reason=%s", email_id, result.error)

    row = await repository.get_email(email_id)
    if row is None:
        raise RuntimeError("Email record disappeared after sending.")
    return row, result.success
