"""
Chat-completions response parsing.

Turns a decoded chat-completions body into a ``GenerateResult``. Missing
or unexpected fields fall back to empty text, zero usage and the
``unknown`` finish reason so that minor gateway variations never fail a
call that the gateway itself reported as successful.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from .types import (
    FinishReason,
    GenerateResult,
    ResponseInfo,
    TextPart,
    ToolCall,
    Usage,
)

JSON = dict[str, Any]

_FINISH_REASONS: dict[str, FinishReason] = {
    "stop": "stop",
    "length": "length",
    "content_filter": "content-filter",
    "tool_calls": "tool-calls",
    "function_call": "tool-calls",
    "error": "error",
}


def map_finish_reason(reason: str | None) -> FinishReason:
    if not isinstance(reason, str):
        return "unknown"
    return _FINISH_REASONS.get(reason, "unknown")


def _dict(value: Any) -> JSON:
    return value if isinstance(value, dict) else {}


def _int(value: Any) -> int:
    return value if isinstance(value, int) and not isinstance(value, bool) else 0


def convert_usage(api_usage: JSON | None) -> Usage:
    """Convert gateway usage to our Usage model."""
    if not isinstance(api_usage, dict):
        return Usage()

    prompt_details = _dict(api_usage.get("prompt_tokens_details"))
    completion_details = _dict(api_usage.get("completion_tokens_details"))
    return Usage(
        prompt_tokens=_int(api_usage.get("prompt_tokens")),
        completion_tokens=_int(api_usage.get("completion_tokens")),
        total_tokens=_int(api_usage.get("total_tokens")),
        reasoning_tokens=_int(completion_details.get("reasoning_tokens")),
        cached_prompt_tokens=_int(prompt_details.get("cached_tokens")),
    )


def _str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def parse_timestamp(created: Any) -> datetime | None:
    if isinstance(created, int | float) and not isinstance(created, bool):
        return datetime.fromtimestamp(created, tz=UTC)
    return None


def _first_choice(data: JSON) -> JSON:
    choices = data.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        return choices[0]
    return {}


def _tool_call(raw: Any) -> ToolCall | None:
    if not isinstance(raw, dict):
        return None
    fn = _dict(raw.get("function"))
    arguments = fn.get("arguments")
    if arguments is None:
        arguments = ""
    elif not isinstance(arguments, str):
        # Some gateways send decoded arguments
        arguments = json.dumps(arguments)
    return ToolCall(
        tool_call_id=_str(raw.get("id")) or "",
        tool_name=_str(fn.get("name")) or "",
        input=arguments,
    )


def parse_response(data: Any, headers: dict[str, str] | None = None) -> GenerateResult:
    """Parse a chat-completions response body."""
    body: JSON = data if isinstance(data, dict) else {}
    choice = _first_choice(body)
    message = _dict(choice.get("message"))

    content: list[TextPart | ToolCall] = []
    text = message.get("content")
    if isinstance(text, str) and text:
        content.append(TextPart(text=text))

    tool_calls = message.get("tool_calls")
    for raw in tool_calls if isinstance(tool_calls, list) else []:
        if (call := _tool_call(raw)) is not None:
            content.append(call)

    return GenerateResult(
        content=content,
        finish_reason=map_finish_reason(choice.get("finish_reason")),
        usage=convert_usage(body.get("usage")),
        response=ResponseInfo(
            id=_str(body.get("id")),
            model_id=_str(body.get("model")),
            timestamp=parse_timestamp(body.get("created")),
            headers=headers or {},
            body=data,
        ),
    )
