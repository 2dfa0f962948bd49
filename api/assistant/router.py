"""
Chat assistant API endpoints (mounted under /api/v1/ai).
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from auth import dependencies as auth_dependencies
from core import responses

from . import service

router = APIRouter()


class ChatRequest(BaseModel):
    conversation_id: UUID | None = None
    message: str = Field(..., min_length=1)
    model: str | None = Field(default=None, max_length=100)


@router.post("/chat")
async def chat(
    request: ChatRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> StreamingResponse:
    turn = await service.start_chat(
        user_id=current_user["id"],
        message=request.message,
        conversation_id=request.conversation_id,
        model=request.model,
    )
    return StreamingResponse(
        service.stream_reply(turn),
        media_type="application/x-ndjson",
        headers={"Cache-Control": "no-cache"},
    )


@router.get("/conversations")
async def list_conversations(
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    rows = await service.list_conversations(user_id=current_user["id"])
    return responses.ok(rows)


@router.get("/conversations/{conversation_id}")
async def get_conversation(
    conversation_id: UUID,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    conversation = await service.get_conversation(conversation_id, user_id=current_user["id"])
    return responses.ok(conversation)


@router.delete("/conversations/{conversation_id}")
async def delete_conversation(
    conversation_id: UUID,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    await service.delete_conversation(conversation_id, user_id=current_user["id"])
    return responses.ok(message="Conversation deleted successfully.")
