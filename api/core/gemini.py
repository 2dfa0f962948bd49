"""
Gemini HTTP client helpers.

Used endpoint:
- POST /v1beta/models/{model}:streamGenerateContent?alt=sse
    -> server-sent events, one `data: {...}` line per partial response:
       {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}
"""

from __future__ import annotations

import json
from typing import Any, AsyncIterator

import httpx

from . import config

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"
DEFAULT_MODEL = "gemini-2.5-flash"


# Gemini failures are explicit and separable from other runtime errors.
class GeminiError(RuntimeError):
    pass


def base_url() -> str:
    return config.env_str("GEMINI_BASE_URL", DEFAULT_BASE_URL).rstrip("/")


def api_key() -> str:
    return config.env_str("GEMINI_API_KEY", "")


def default_model() -> str:
    return config.env_str("GEMINI_DEFAULT_MODEL", DEFAULT_MODEL)


def timeout_s() -> float:
    return config.env_float("AI_TIMEOUT_S", 120.0)


def user_content(text: str) -> dict[str, Any]:
    return {"role": "user", "parts": [{"text": text}]}


def model_content(text: str) -> dict[str, Any]:
    return {"role": "model", "parts": [{"text": text}]}


def chunk_text(payload: dict[str, Any]) -> str:
    """
    Concatenate the text parts of the first candidate of one stream event.
    """
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""
    content = (candidates[0] or {}).get("content")
    if not isinstance(content, dict):
        return ""
    parts = content.get("parts")
    if not isinstance(parts, list):
        return ""
    return "".join(str(p.get("text") or "") for p in parts if isinstance(p, dict))


def parse_sse_line(line: str) -> str:
    """
    Extract generated text from a single SSE line. Non-data lines (blank
    separators, comments, `event:` fields) yield "".
    """
    line = (line or "").strip()
    if not line.startswith("data:"):
        return ""
    raw = line[len("data:"):].strip()
    if not raw or raw == "[DONE]":
        return ""
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise GeminiError("Gemini returned a malformed stream event.") from exc

    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        raise GeminiError(f"Gemini stream error: {error.get('message') or error}")
    if not isinstance(payload, dict):
        return ""
    return chunk_text(payload)


def _build_payload(
    contents: list[dict[str, Any]],
    *,
    system_instruction: str | None,
    temperature: float | None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {"contents": contents}
    if system_instruction:
        payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
    if temperature is not None:
        payload["generationConfig"] = {"temperature": float(temperature)}
    return payload


async def stream_text(
    *,
    model: str,
    contents: list[dict[str, Any]],
    system_instruction: str | None = None,
    temperature: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[str]:
    """
    Stream generated text fragments for `contents` from `model`.

    Fragments are yielded in arrival order; empty fragments are skipped.
    """
    key = api_key()
    if not key:
        raise GeminiError("GEMINI_API_KEY is not set.")
    model = (model or "").strip() or default_model()
    if not contents:
        raise GeminiError("Contents list is empty.")

    payload = _build_payload(contents, system_instruction=system_instruction, temperature=temperature)

    async with httpx.AsyncClient(base_url=base_url(), timeout=timeout_s(), transport=transport) as client:
        async with client.stream(
            "POST",
            f"/v1beta/models/{model}:streamGenerateContent",
            params={"alt": "sse"},
            headers={"x-goog-api-key": key},
            json=payload,
        ) as resp:
            if resp.status_code != 200:
                # Avoid dumping huge bodies; include a small snippet.
                body = (await resp.aread()).decode("utf-8", errors="replace")[:500]
                raise GeminiError(f"Gemini stream request failed: {resp.status_code} {body}")

            async for line in resp.aiter_lines():
                text = parse_sse_line(line)
                if text:
                    yield text
