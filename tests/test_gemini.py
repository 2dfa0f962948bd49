import json

import httpx
import pytest

from core import gemini


def sse(*payloads) -> bytes:
    return "".join(f"data: {json.dumps(p)}\n\n" for p in payloads).encode("utf-8")


def text_event(text: str) -> dict:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


class TestParseSseLine:
    @pytest.mark.parametrize("line", ["", "   ", ": keep-alive", "event: message", "data:", "data: [DONE]"])
    def test_non_text_lines(self, line):
        assert gemini.parse_sse_line(line) == ""

    def test_text_parts_are_joined(self):
        payload = {"candidates": [{"content": {"parts": [{"text": "Hel"}, {"text": "lo"}]}}]}
        assert gemini.parse_sse_line("data: " + json.dumps(payload)) == "Hello"

    def test_event_without_candidates(self):
        assert gemini.parse_sse_line('data: {"usageMetadata": {"totalTokenCount": 3}}') == ""

    def test_malformed_json(self):
        with pytest.raises(gemini.GeminiError):
            gemini.parse_sse_line("data: {not json")

    def test_error_event(self):
        with pytest.raises(gemini.GeminiError, match="quota"):
            gemini.parse_sse_line('data: {"error": {"code": 429, "message": "quota exceeded"}}')


async def collect(**kwargs) -> list[str]:
    return [text async for text in gemini.stream_text(**kwargs)]


async def test_stream_text_yields_fragments(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["alt"] = request.url.params.get("alt")
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["body"] = json.loads(request.content)
        body = sse(text_event("Hi"), {"usageMetadata": {}}, text_event(" there"))
        return httpx.Response(200, content=body, headers={"content-type": "text/event-stream"})

    fragments = await collect(
        model="gemini-2.5-flash",
        contents=[gemini.user_content("hello")],
        system_instruction="Be brief.",
        temperature=0.2,
        transport=httpx.MockTransport(handler),
    )

    assert fragments == ["Hi", " there"]
    assert seen["path"] == "/v1beta/models/gemini-2.5-flash:streamGenerateContent"
    assert seen["alt"] == "sse"
    assert seen["key"] == "test-key"
    assert seen["body"]["contents"] == [{"role": "user", "parts": [{"text": "hello"}]}]
    assert seen["body"]["systemInstruction"] == {"parts": [{"text": "Be brief."}]}
    assert seen["body"]["generationConfig"] == {"temperature": 0.2}


async def test_stream_text_non_200(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": {"message": "bad model"}})

    with pytest.raises(gemini.GeminiError, match="400"):
        await collect(model="nope", contents=[gemini.user_content("x")], transport=httpx.MockTransport(handler))


async def test_stream_text_requires_api_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    with pytest.raises(gemini.GeminiError, match="GEMINI_API_KEY"):
        await collect(model="gemini-2.5-flash", contents=[gemini.user_content("x")])
