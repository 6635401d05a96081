"""Shared test doubles and payload builders."""

import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx


class RecordingFetch:
    """Fake fetch: records every request and replays queued responses."""

    def __init__(self, responder: Callable[[], httpx.Response] | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.stream_flags: list[bool] = []
        self._queued: list[httpx.Response] = []
        self._responder = responder

    def queue(self, response: httpx.Response) -> None:
        self._queued.append(response)

    async def __call__(
        self, request: httpx.Request, *, stream: bool = False
    ) -> httpx.Response:
        self.requests.append(request)
        self.stream_flags.append(stream)
        if self._queued:
            return self._queued.pop(0)
        if self._responder is not None:
            return self._responder()
        raise AssertionError("no response queued")

    @property
    def last_body(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)

    @property
    def last_headers(self) -> httpx.Headers:
        return self.requests[-1].headers


def completion_payload(
    content: str | None = "Test response",
    finish_reason: str | None = "stop",
    tool_calls: list[dict[str, Any]] | None = None,
    usage: dict[str, Any] | None = None,
) -> dict[str, Any]:
    message: dict[str, Any] = {"role": "assistant", "content": content}
    if tool_calls is not None:
        message["tool_calls"] = tool_calls
    return {
        "id": "chatcmpl-123",
        "model": "gpt-4o",
        "created": 1700000000,
        "choices": [{"index": 0, "message": message, "finish_reason": finish_reason}],
        "usage": usage
        or {"prompt_tokens": 10, "completion_tokens": 20, "total_tokens": 30},
    }


def completion_response(**kwargs: Any) -> httpx.Response:
    return httpx.Response(200, json=completion_payload(**kwargs))


def sse_bytes(*frames: dict[str, Any] | str) -> bytes:
    """Encode frames as ``data:`` events; strings are sent verbatim."""
    out = []
    for frame in frames:
        payload = frame if isinstance(frame, str) else json.dumps(frame)
        out.append(f"data: {payload}\n\n")
    return "".join(out).encode("utf-8")


async def aiter_chunks(
    chunks: list[bytes], error: Exception | None = None
) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk
    if error is not None:
        raise error


def split_every(data: bytes, size: int) -> list[bytes]:
    return [data[i:i + size] for i in range(0, len(data), size)]


def text_frame(text: str, finish_reason: str | None = None) -> dict[str, Any]:
    return {
        "choices": [
            {"index": 0, "delta": {"content": text}, "finish_reason": finish_reason}
        ]
    }


def finish_frame(reason: str, usage: dict[str, Any] | None = None) -> dict[str, Any]:
    frame: dict[str, Any] = {
        "choices": [{"index": 0, "delta": {}, "finish_reason": reason}]
    }
    if usage is not None:
        frame["usage"] = usage
    return frame


async def collect(stream: AsyncIterator[Any]) -> list[Any]:
    return [part async for part in stream]


def user_prompt(text: str = "Hello") -> dict[str, Any]:
    return {"prompt": [{"role": "user", "content": [{"type": "text", "text": text}]}]}
