"""
Chat persistence helpers (conversations and messages).
"""

from __future__ import annotations

from uuid import UUID

from core import db

CONVERSATION_COLUMNS = "id, user_id, title, model, last_message_at, created_at, updated_at"
MESSAGE_COLUMNS = "id, conversation_id, role, content, created_at"


async def get_conversation(conversation_id: UUID, *, user_id: UUID) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {CONVERSATION_COLUMNS}
        FROM conversations
        WHERE id = $1
          AND user_id = $2
        """,
        conversation_id,
        user_id,
    )


async def create_conversation(*, user_id: UUID, title: str, model: str) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO conversations (user_id, title, model)
        VALUES ($1, $2, $3)
        RETURNING {CONVERSATION_COLUMNS}
        """,
        user_id,
        title,
        model,
    )
    if row is None:
        raise RuntimeError("Failed to create conversation.")
    return row


async def insert_message(conversation_id: UUID, *, role: str, content: str) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO messages (conversation_id, role, content)
        VALUES ($1, $2, $3)
        RETURNING {MESSAGE_COLUMNS}
        """,
        conversation_id,
        role,
        content,
    )
    if row is None:
        raise RuntimeError("Failed to insert message.")
    return row


async def list_recent_messages(conversation_id: UUID, *, limit: int) -> list[dict]:
    """
    Most recent `limit` messages, returned oldest first.
    """
    rows = await db.fetch_all(
        f"""
        SELECT {MESSAGE_COLUMNS}
        FROM messages
        WHERE conversation_id = $1
        ORDER BY created_at DESC, id DESC
        LIMIT $2
        """,
        conversation_id,
        limit,
    )
    rows.reverse()
    return rows


async def save_assistant_reply(conversation_id: UUID, content: str) -> dict:
    """
    Store the completed assistant message and stamp `last_message_at` in one
    transaction.
    """
    async with db.transaction() as conn:
        row = await conn.fetchrow(
            f"""
            INSERT INTO messages (conversation_id, role, content)
            VALUES ($1, 'ASSISTANT', $2)
            RETURNING {MESSAGE_COLUMNS}
            """,
            conversation_id,
            content,
        )
        await conn.execute(
            """
            UPDATE conversations
            SET last_message_at = now(),
                updated_at = now()
            WHERE id = $1
            """,
            conversation_id,
        )
    if row is None:
        raise RuntimeError("Failed to save assistant message.")
    return dict(row)


async def list_conversations(*, user_id: UUID, limit: int = 50) -> list[dict]:
    return await db.fetch_all(
        """
        SELECT
            c.id, c.user_id, c.title, c.model, c.last_message_at, c.created_at, c.updated_at,
            (SELECT count(*) FROM messages m WHERE m.conversation_id = c.id) AS message_count
        FROM conversations c
        WHERE c.user_id = $1
        ORDER BY c.last_message_at DESC NULLS LAST, c.created_at DESC
        LIMIT $2
        """,
        user_id,
        limit,
    )


async def list_messages(conversation_id: UUID) -> list[dict]:
    return await db.fetch_all(
        f"""
        SELECT {MESSAGE_COLUMNS}
        FROM messages
        WHERE conversation_id = $1
        ORDER BY created_at ASC, id ASC
        """,
        conversation_id,
    )


async def delete_conversation(conversation_id: UUID, *, user_id: UUID) -> bool:
    status = await db.execute(
        "DELETE FROM conversations WHERE id = $1 AND user_id = $2",
        conversation_id,
        user_id,
    )
    return db.affected_rows(status) > 0
