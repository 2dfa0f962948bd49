"""
Prompt builders for the chat assistant.
"""

from __future__ import annotations

from typing import Any

from core import gemini


def system_prompt() -> str:
    """
    System instruction sent with every chat turn.
    """
    return (
        "You are the assistant of a startup ecosystem directory that catalogs accelerators, "
        "companies and the people behind them.\n"
        "Help users explore startups, funding stages, accelerator programs, technology stacks "
        "and founders, and answer general questions about building companies.\n"
        "Be concise and factual. If you do not know something, say so instead of guessing.\n"
        "Format lists and code with Markdown when it improves readability."
    )


def build_contents(history: list[dict], message: str) -> list[dict[str, Any]]:
    """
    Convert stored messages (oldest first) plus the new user message into
    Gemini `contents`.
    """
    contents: list[dict[str, Any]] = []
    for row in history:
        text = str(row.get("content") or "")
        if not text:
            continue
        if row.get("role") == "ASSISTANT":
            contents.append(gemini.model_content(text))
        else:
            contents.append(gemini.user_content(text))
    contents.append(gemini.user_content(message))
    return contents
