"""
Chat orchestration.

Flow for one turn:
1) Resolve the caller's conversation (or create one titled from the message)
2) Load recent history and store the user message
3) Stream the model reply as NDJSON lines: one `chunk` per fragment
4) After the last fragment, store the full reply, stamp `last_message_at`
   and emit `done`; an upstream or storage failure emits `error` instead

The stored assistant message is exactly the concatenation of the streamed
chunks.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator
from uuid import UUID

from core import config, gemini
from core.errors import NotFoundError

from . import prompts, repository

logger = logging.getLogger(__name__)

TITLE_MAX_CHARS = 50


@dataclass(frozen=True)
class ChatTurn:
    conversation_id: UUID
    model: str
    contents: list[dict[str, Any]]


def history_messages_limit() -> int:
    return max(config.env_int("AI_HISTORY_MESSAGES", 20), 0)


def conversation_title(message: str) -> str:
    if len(message) > TITLE_MAX_CHARS:
        return message[:TITLE_MAX_CHARS] + "..."
    return message


def ndjson_line(event: dict[str, Any]) -> str:
    return json.dumps(event, ensure_ascii=False) + "\n"


async def start_chat(
    *,
    user_id: UUID,
    message: str,
    conversation_id: UUID | None = None,
    model: str | None = None,
) -> ChatTurn:
    """
    Prepare a chat turn. Raises NotFoundError (before any streaming) when
    `conversation_id` does not belong to the caller.
    """
    model = (model or "").strip() or gemini.default_model()

    if conversation_id is not None:
        conversation = await repository.get_conversation(conversation_id, user_id=user_id)
        if conversation is None:
            raise NotFoundError("Conversation not found.")
        limit = history_messages_limit()
        history = await repository.list_recent_messages(conversation["id"], limit=limit) if limit else []
    else:
        conversation = await repository.create_conversation(
            user_id=user_id,
            title=conversation_title(message),
            model=model,
        )
        history = []

    await repository.insert_message(conversation["id"], role="USER", content=message)

    return ChatTurn(
        conversation_id=conversation["id"],
        model=model,
        contents=prompts.build_contents(history, message),
    )


async def stream_reply(turn: ChatTurn) -> AsyncIterator[str]:
    conversation_id = str(turn.conversation_id)
    parts: list[str] = []

    try:
        async for text in gemini.stream_text(
            model=turn.model,
            contents=turn.contents,
            system_instruction=prompts.system_prompt(),
        ):
            parts.append(text)
            yield ndjson_line({"type": "chunk", "content": text, "conversation_id": conversation_id})

        full_response = "".join(parts)
        await repository.save_assistant_reply(turn.conversation_id, full_response)
    except gemini.GeminiError as exc:
        logger.warning("chat_stream_failed conversation_id=%s error=%s", conversation_id, exc)
        yield ndjson_line({"type": "error", "error": str(exc)})
        return
    except Exception:
        # Every failure ends the stream with an error line.
        logger.exception("chat_stream_failed conversation_id=%s", conversation_id)
        yield ndjson_line({"type": "error", "error": "Failed to generate response."})
        return

    logger.info("chat_reply_saved conversation_id=%s chunks=%s", conversation_id, len(parts))
    yield ndjson_line({"type": "done", "conversation_id": conversation_id, "full_response": full_response})


async def list_conversations(*, user_id: UUID) -> list[dict]:
    return await repository.list_conversations(user_id=user_id, limit=50)


async def get_conversation(conversation_id: UUID, *, user_id: UUID) -> dict:
    conversation = await repository.get_conversation(conversation_id, user_id=user_id)
    if conversation is None:
        raise NotFoundError("Conversation not found.")
    messages = await repository.list_messages(conversation_id)
    return {**conversation, "messages": messages}


async def delete_conversation(conversation_id: UUID, *, user_id: UUID) -> bool:
    return await repository.delete_conversation(conversation_id, user_id=user_id)
