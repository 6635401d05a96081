# helicone_provider/llm/request.py
from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from ..errors import UnsupportedFunctionalityError
from .metadata import ExtraBody, project_metadata
from .routing import parse_model_id
from .types import (
    AssistantMessage,
    CallOptions,
    CallWarning,
    FilePart,
    FunctionTool,
    PromptMessage,
    SystemMessage,
    TextPart,
    ToolCallPart,
    ToolChoice,
    ToolMessage,
    UserMessage,
)

logger = logging.getLogger(__name__)

JSON = dict[str, Any]
MsgList = list[dict[str, Any]]

CHAT_COMPLETIONS_PATH = "/v1/chat/completions"


@dataclass
class ChatRequest:
    """Everything needed to send one chat-completions call."""

    url: str
    headers: dict[str, str]
    body: JSON
    warnings: list[CallWarning] = field(default_factory=list)

    def to_httpx(self) -> httpx.Request:
        return httpx.Request(
            "POST",
            self.url,
            headers=self.headers,
            content=json.dumps(self.body).encode("utf-8"),
        )


def _json_text(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value)


def _image_url(part: FilePart) -> str:
    if isinstance(part.data, bytes):
        encoded = base64.b64encode(part.data).decode("ascii")
    elif part.data.startswith(("http://", "https://", "data:")):
        return part.data
    else:
        encoded = part.data
    media_type = "image/jpeg" if part.media_type == "image/*" else part.media_type
    return f"data:{media_type};base64,{encoded}"


def _user_content(msg: UserMessage) -> str | list[dict[str, Any]]:
    # Text-only turns flatten to a single string
    if all(isinstance(p, TextPart) for p in msg.content):
        return "".join(p.text for p in msg.content)

    parts: list[dict[str, Any]] = []
    for p in msg.content:
        if isinstance(p, TextPart):
            parts.append({"type": "text", "text": p.text})
        elif p.media_type.startswith("image/"):
            parts.append({"type": "image_url", "image_url": {"url": _image_url(p)}})
        else:
            raise UnsupportedFunctionalityError(f"file part media type {p.media_type}")
    return parts


def _to_chat_messages(prompt: list[PromptMessage]) -> MsgList:
    out: MsgList = []
    for m in prompt:
        if isinstance(m, SystemMessage):
            out.append({"role": "system", "content": m.content})
        elif isinstance(m, UserMessage):
            out.append({"role": "user", "content": _user_content(m)})
        elif isinstance(m, AssistantMessage):
            text = ""
            tool_calls = []
            for p in m.content:
                if isinstance(p, TextPart):
                    text += p.text
                elif isinstance(p, ToolCallPart):
                    tool_calls.append({
                        "id": p.tool_call_id,
                        "type": "function",
                        "function": {
                            "name": p.tool_name,
                            "arguments": _json_text(p.input),
                        },
                    })
                # reasoning parts are not sent back
            msg: dict[str, Any] = {"role": "assistant", "content": text}
            if tool_calls:
                msg["tool_calls"] = tool_calls
            out.append(msg)
        elif isinstance(m, ToolMessage):
            for result in m.content:
                out.append({
                    "role": "tool",
                    "tool_call_id": result.tool_call_id,
                    "content": _json_text(result.output),
                })
    return out


def _to_chat_tools(tools: list[FunctionTool]) -> list[dict[str, Any]]:
    res = []
    for t in tools:
        fn: dict[str, Any] = {"name": t.name}
        if t.description is not None:
            fn["description"] = t.description
        fn["parameters"] = t.input_schema
        res.append({"type": "function", "function": fn})
    return res


def _to_chat_tool_choice(choice: ToolChoice) -> str | dict[str, Any]:
    if isinstance(choice, str):
        return choice
    return {"type": "function", "function": {"name": choice.tool_name}}


def build_body(
    model_id: str,
    options: CallOptions,
    stream: bool,
    extra_body: ExtraBody | None = None,
) -> tuple[JSON, list[CallWarning]]:
    """Compose the JSON payload; the metadata block never enters it."""
    warnings: list[CallWarning] = []
    route = parse_model_id(model_id)

    payload: JSON = {
        "model": route.model_id,
        "messages": _to_chat_messages(options.prompt),
    }
    if options.tools:
        payload["tools"] = _to_chat_tools(options.tools)
        if options.tool_choice is not None:
            payload["tool_choice"] = _to_chat_tool_choice(options.tool_choice)

    sampling = {
        "max_tokens": options.max_output_tokens,
        "temperature": options.temperature,
        "top_p": options.top_p,
        "frequency_penalty": options.frequency_penalty,
        "presence_penalty": options.presence_penalty,
        "stop": options.stop_sequences,
        "seed": options.seed,
    }
    payload.update({k: v for k, v in sampling.items() if v is not None})

    if options.top_k is not None:
        warnings.append(CallWarning(type="unsupported-setting", setting="top_k"))

    fmt = options.response_format
    if fmt is not None and fmt.type == "json":
        if fmt.schema_ is not None:
            json_schema: dict[str, Any] = {
                "name": fmt.name or "response",
                "schema": fmt.schema_,
            }
            if fmt.description is not None:
                json_schema["description"] = fmt.description
            payload["response_format"] = {
                "type": "json_schema",
                "json_schema": json_schema,
            }
        else:
            payload["response_format"] = {"type": "json_object"}

    payload["stream"] = stream

    if extra_body is not None:
        payload.update(extra_body.passthrough)

    return payload, warnings


def build_headers(
    api_key: str,
    static_headers: dict[str, str] | None = None,
    call_headers: dict[str, str] | None = None,
    extra_body: ExtraBody | None = None,
) -> dict[str, str]:
    """Later sources win: auth, content type, static, per-call, metadata."""
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    headers.update(static_headers or {})
    headers.update(call_headers or {})
    headers.update(project_metadata(extra_body.helicone if extra_body else None))
    return headers


def build_request(
    *,
    base_url: str,
    api_key: str,
    model_id: str,
    options: CallOptions,
    stream: bool,
    static_headers: dict[str, str] | None = None,
    extra_body: ExtraBody | None = None,
) -> ChatRequest:
    body, warnings = build_body(model_id, options, stream, extra_body)
    headers = build_headers(api_key, static_headers, options.headers, extra_body)
    url = base_url.rstrip("/") + CHAT_COMPLETIONS_PATH

    logger.debug(
        "Built request for %s (stream=%s) with headers: %s",
        model_id,
        stream,
        sorted(h for h in headers if h != "Authorization"),
    )
    return ChatRequest(url=url, headers=headers, body=body, warnings=warnings)
