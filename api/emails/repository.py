"""
Email record persistence. Every row embeds its sender as
`{"id", "name", "email"}`.
"""

from __future__ import annotations

from uuid import UUID

from core import db

EMAIL_SELECT = """
    SELECT
        e.id, e.sent_by, e."to", e.cc, e.bcc, e.subject, e.body, e.body_html,
        e.status, e.sent_at, e.message_id, e.smtp_response, e.failure_reason,
        e.ip_address, e.user_agent, e.created_at, e.updated_at,
        CASE WHEN u.id IS NULL THEN NULL
             ELSE json_build_object('id', u.id, 'name', u.name, 'email', u.email)
        END AS sender
    FROM emails e
    LEFT JOIN users u ON u.id = e.sent_by
"""


async def create_pending_email(
    *,
    sent_by: UUID,
    to: list[str],
    cc: list[str],
    bcc: list[str],
    subject: str,
    body: str,
    body_html: str | None,
    ip_address: str | None,
    user_agent: str | None,
) -> UUID:
    email_id = await db.fetch_val(
        """
        INSERT INTO emails (sent_by, "to", cc, bcc, subject, body, body_html, status, ip_address, user_agent)
        VALUES ($1, $2, $3, $4, $5, $6, $7, 'PENDING', $8, $9)
        RETURNING id
        """,
        sent_by,
        to,
        cc,
        bcc,
        subject,
        body,
        body_html,
        ip_address,
        user_agent,
    )
    if email_id is None:
        raise RuntimeError("Failed to create email record.")
    return email_id


async def mark_sent(email_id: UUID, *, message_id: str | None, smtp_response: str | None) -> None:
    await db.execute(
        """
        UPDATE emails
        SET status = 'SENT',
            sent_at = now(),
            message_id = $2,
            smtp_response = $3,
            failure_reason = NULL,
            updated_at = now()
        WHERE id = $1
        """,
        email_id,
        message_id,
        smtp_response,
    )


async def mark_failed(email_id: UUID, *, failure_reason: str | None) -> None:
    await db.execute(
        """
        UPDATE emails
        SET status = 'FAILED',
            sent_at = NULL,
            failure_reason = $2,
            updated_at = now()
        WHERE id = $1
        """,
        email_id,
        failure_reason,
    )


async def get_email(email_id: UUID) -> dict | None:
    return await db.fetch_one(f"{EMAIL_SELECT} WHERE e.id = $1", email_id)


async def list_emails(*, offset: int, limit: int, status: str | None = None) -> tuple[list[dict], int]:
    filters = db.Filters()
    if status:
        filters.add(f"e.status = {filters.param(status)}")

    where = filters.where()
    total = await db.fetch_val(f"SELECT count(*) FROM emails e {where}", *filters.args)
    n = len(filters.args)
    rows = await db.fetch_all(
        f"""
        {EMAIL_SELECT}
        {where}
        ORDER BY e.created_at DESC
        LIMIT ${n + 1} OFFSET ${n + 2}
        """,
        *filters.args,
        limit,
        offset,
    )
    return rows, int(total or 0)
