"""
Streaming decoder for chat-completions server-sent events

Turns the raw body of a streaming chat-completions response into an
ordered sequence of stream parts:
- ``stream-start`` first, carrying call warnings
- ``response-metadata`` once, from the first frame with an id/model
- ``text-delta`` for each non-empty content delta
- ``tool-call-delta`` for each argument fragment, then one complete
  ``tool-call`` per call when the choice finishes
- ``finish`` last, with the mapped reason and the latest usage seen

Frames that are not ``data:`` lines are ignored, frames that fail to
parse are skipped with a warning, and a body that ends without the
``[DONE]`` sentinel is treated as finished. Transport errors raised while
reading the body propagate out of the iterator.
"""

from __future__ import annotations

import codecs
import json
import logging
import uuid
from collections.abc import AsyncIterable, AsyncIterator
from dataclasses import dataclass
from typing import Any

from .response import convert_usage, map_finish_reason, parse_timestamp
from .types import (
    CallWarning,
    Finish,
    FinishReason,
    ResponseMetadata,
    StreamPart,
    StreamStart,
    TextDelta,
    ToolCall,
    ToolCallDelta,
    Usage,
)

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"
DATA_PREFIX = "data:"


async def iter_sse_data(chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """
    Yield the payload of every ``data:`` line in a byte stream.

    Lines may be split across chunks, and so may multi-byte characters.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    buffer = ""

    async for chunk in chunks:
        buffer += decoder.decode(chunk)
        *lines, buffer = buffer.split("\n")
        for line in lines:
            if (data := _data_payload(line)) is not None:
                yield data

    buffer += decoder.decode(b"", final=True)
    if (data := _data_payload(buffer)) is not None:
        yield data


def _data_payload(line: str) -> str | None:
    line = line.rstrip("\r")
    if not line.startswith(DATA_PREFIX):
        return None
    data = line[len(DATA_PREFIX):]
    if data.startswith(" "):
        data = data[1:]
    return data


@dataclass
class _ToolCallBuffer:
    tool_call_id: str | None = None
    tool_name: str = ""
    arguments: str = ""
    flushed: bool = False

    def resolve_id(self) -> str:
        # Generated only when a part must be emitted before the gateway sent one
        if self.tool_call_id is None:
            self.tool_call_id = f"call_{uuid.uuid4().hex}"
        return self.tool_call_id


class StreamDecoder:
    """
    Single-use decoder for one streaming response.

    Holds the per-call state needed to reassemble tool-call arguments that
    arrive split across frames, keyed by the call's index.
    """

    def __init__(self, warnings: list[CallWarning] | None = None):
        self.warnings = warnings or []
        self.skipped_frames = 0
        self._tool_calls: dict[Any, _ToolCallBuffer] = {}
        self._finish_reason: FinishReason | None = None
        self._usage: Usage | None = None
        self._metadata_sent = False
        self._consumed = False

    async def decode(self, chunks: AsyncIterable[bytes]) -> AsyncIterator[StreamPart]:
        if self._consumed:
            raise RuntimeError("StreamDecoder instances are single-use")
        self._consumed = True

        yield StreamStart(warnings=self.warnings)

        saw_sentinel = False
        async for data in iter_sse_data(chunks):
            if data.strip() == DONE_SENTINEL:
                saw_sentinel = True
                break

            try:
                frame = json.loads(data)
            except json.JSONDecodeError:
                self.skipped_frames += 1
                logger.warning(f"Skipping malformed stream frame: {data[:200]!r}")
                continue
            if not isinstance(frame, dict):
                self.skipped_frames += 1
                logger.warning(f"Skipping non-object stream frame: {data[:200]!r}")
                continue

            for part in self._handle_frame(frame):
                yield part

        if not saw_sentinel:
            logger.warning("Stream closed without [DONE]; treating as finished")
        if self.skipped_frames:
            logger.warning(f"Skipped {self.skipped_frames} malformed stream frame(s)")

        for part in self._flush_tool_calls():
            yield part

        yield Finish(
            finish_reason=self._finish_reason or "unknown",
            usage=self._usage or Usage(),
        )

    # ---------- frame handling ----------
    def _handle_frame(self, frame: dict[str, Any]) -> list[StreamPart]:
        parts: list[StreamPart] = []

        if error := frame.get("error"):
            logger.error(f"Gateway reported a stream error: {error}")
            self._finish_reason = "error"
            return parts

        if not self._metadata_sent and any(k in frame for k in ("id", "model", "created")):
            self._metadata_sent = True
            parts.append(ResponseMetadata(
                id=frame.get("id") if isinstance(frame.get("id"), str) else None,
                model_id=frame.get("model") if isinstance(frame.get("model"), str) else None,
                timestamp=parse_timestamp(frame.get("created")),
            ))

        # Usage usually arrives on the last frame, sometimes with no choices
        if isinstance(frame.get("usage"), dict):
            self._usage = convert_usage(frame["usage"])

        choices = frame.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return parts
        choice = choices[0]
        delta = choice.get("delta")
        if not isinstance(delta, dict):
            delta = {}

        if isinstance(content := delta.get("content"), str) and content:
            parts.append(TextDelta(text=content))

        if isinstance(tool_calls := delta.get("tool_calls"), list):
            for tool_call in tool_calls:
                if isinstance(tool_call, dict):
                    parts.extend(self._accumulate_tool_call(tool_call))

        if (reason := choice.get("finish_reason")) is not None:
            self._finish_reason = map_finish_reason(reason)
            parts.extend(self._flush_tool_calls())

        return parts

    def _accumulate_tool_call(self, tool_call: dict[str, Any]) -> list[StreamPart]:
        """Add one tool-call delta to its buffer and emit the fragment."""
        index = tool_call.get("index")
        call_id = tool_call.get("id")
        if isinstance(index, int):
            key: Any = index
        elif isinstance(call_id, str) and call_id:
            key = call_id
        else:
            key = len(self._tool_calls)
        func = tool_call.get("function")
        if not isinstance(func, dict):
            func = {}

        buf = self._tool_calls.get(key)
        if buf is None or buf.flushed:
            buf = _ToolCallBuffer()
            self._tool_calls[key] = buf
        if isinstance(call_id, str) and call_id and buf.tool_call_id is None:
            buf.tool_call_id = call_id

        if isinstance(name := func.get("name"), str) and name and not buf.tool_name:
            buf.tool_name = name

        fragment = func.get("arguments")
        if not isinstance(fragment, str) or not fragment:
            return []
        buf.arguments += fragment
        return [ToolCallDelta(
            tool_call_id=buf.resolve_id(),
            tool_name=buf.tool_name,
            input_delta=fragment,
        )]

    def _flush_tool_calls(self) -> list[StreamPart]:
        parts: list[StreamPart] = []
        for buf in self._tool_calls.values():
            if buf.flushed:
                continue
            buf.flushed = True
            parts.append(ToolCall(
                tool_call_id=buf.resolve_id(),
                tool_name=buf.tool_name,
                input=buf.arguments,
            ))
        return parts


def decode_stream(
    chunks: AsyncIterable[bytes], warnings: list[CallWarning] | None = None
) -> AsyncIterator[StreamPart]:
    """Decode one streaming response body into stream parts."""
    return StreamDecoder(warnings).decode(chunks)
