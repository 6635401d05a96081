"""
Language-model call contract

Models shared by every component of the provider: the prompt a caller
sends, the options of one call, and the results and stream parts the
model hands back.

- Prompt messages are role-tagged and hold typed content parts
- CallOptions carries prompt, tools and sampling settings for one call
- GenerateResult is the buffered outcome of ``do_generate``
- StreamPart is the tagged union yielded by ``do_stream``

Plain dictionaries with the same shape are accepted wherever a model is
expected; they are validated on the way in.
"""
from __future__ import annotations

import json
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# ---------- Prompt ----------

class TextPart(BaseModel):
    type: Literal["text"] = "text"
    text: str

class FilePart(BaseModel):
    type: Literal["file"] = "file"
    media_type: str
    # URL string, base64 string or raw bytes
    data: str | bytes
    filename: str | None = None

class ReasoningPart(BaseModel):
    type: Literal["reasoning"] = "reasoning"
    text: str

class ToolCallPart(BaseModel):
    type: Literal["tool-call"] = "tool-call"
    tool_call_id: str
    tool_name: str
    input: Any = None

class ToolResultPart(BaseModel):
    type: Literal["tool-result"] = "tool-result"
    tool_call_id: str
    tool_name: str
    output: Any = None

UserContent = Annotated[TextPart | FilePart, Field(discriminator="type")]
AssistantContent = Annotated[
    TextPart | ReasoningPart | ToolCallPart, Field(discriminator="type")
]

class SystemMessage(BaseModel):
    role: Literal["system"] = "system"
    content: str

class UserMessage(BaseModel):
    role: Literal["user"] = "user"
    content: list[UserContent]

class AssistantMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: list[AssistantContent]

class ToolMessage(BaseModel):
    role: Literal["tool"] = "tool"
    content: list[ToolResultPart]

PromptMessage = Annotated[
    SystemMessage | UserMessage | AssistantMessage | ToolMessage,
    Field(discriminator="role"),
]

# ---------- Tools & options ----------

class FunctionTool(BaseModel):
    type: Literal["function"] = "function"
    name: str
    description: str | None = None
    # JSON schema, forwarded untouched
    input_schema: dict[str, Any] = Field(default_factory=dict)

class SpecificToolChoice(BaseModel):
    type: Literal["tool"] = "tool"
    tool_name: str

ToolChoice = Literal["auto", "none", "required"] | SpecificToolChoice

class ResponseFormat(BaseModel):
    type: Literal["text", "json"] = "text"
    schema_: dict[str, Any] | None = Field(default=None, alias="schema")
    name: str | None = None
    description: str | None = None

    model_config = ConfigDict(populate_by_name=True)

class CallOptions(BaseModel):
    prompt: list[PromptMessage]
    tools: list[FunctionTool] | None = None
    tool_choice: ToolChoice | None = None
    max_output_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None
    top_k: int | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    stop_sequences: list[str] | None = None
    seed: int | None = None
    response_format: ResponseFormat | None = None
    headers: dict[str, str] | None = None

# ---------- Results ----------

FinishReason = Literal[
    "stop", "length", "tool-calls", "content-filter", "error", "unknown"
]

class Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    reasoning_tokens: int = 0
    cached_prompt_tokens: int = 0

class ToolCall(BaseModel):
    type: Literal["tool-call"] = "tool-call"
    tool_call_id: str
    tool_name: str
    # Arguments exactly as the gateway sent them
    input: str = ""

    @property
    def arguments(self) -> dict[str, Any] | None:
        """Arguments decoded as a JSON object, or None if they are not one."""
        if not self.input.strip():
            return {}
        try:
            parsed = json.loads(self.input)
        except json.JSONDecodeError:
            return None
        return parsed if isinstance(parsed, dict) else None

class CallWarning(BaseModel):
    type: Literal["unsupported-setting", "other"]
    setting: str | None = None
    message: str | None = None

class ResponseInfo(BaseModel):
    id: str | None = None
    model_id: str | None = None
    timestamp: datetime | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None

class GenerateResult(BaseModel):
    content: list[Annotated[TextPart | ToolCall, Field(discriminator="type")]] = []
    finish_reason: FinishReason = "unknown"
    usage: Usage = Field(default_factory=Usage)
    warnings: list[CallWarning] = []
    request: dict[str, Any] = Field(default_factory=dict)
    response: ResponseInfo = Field(default_factory=ResponseInfo)

    @property
    def text(self) -> str:
        return "".join(p.text for p in self.content if isinstance(p, TextPart))

    @property
    def tool_calls(self) -> list[ToolCall]:
        return [p for p in self.content if isinstance(p, ToolCall)]

# ---------- Stream parts ----------

class StreamStart(BaseModel):
    type: Literal["stream-start"] = "stream-start"
    warnings: list[CallWarning] = []

class ResponseMetadata(BaseModel):
    type: Literal["response-metadata"] = "response-metadata"
    id: str | None = None
    model_id: str | None = None
    timestamp: datetime | None = None

class TextDelta(BaseModel):
    type: Literal["text-delta"] = "text-delta"
    text: str

class ToolCallDelta(BaseModel):
    type: Literal["tool-call-delta"] = "tool-call-delta"
    tool_call_id: str
    tool_name: str
    input_delta: str

class Finish(BaseModel):
    type: Literal["finish"] = "finish"
    finish_reason: FinishReason
    usage: Usage = Field(default_factory=Usage)

StreamPart = StreamStart | ResponseMetadata | TextDelta | ToolCallDelta | ToolCall | Finish

@dataclass
class StreamResult:
    """Outcome of ``do_stream``: a lazy, single-use iterator of parts."""

    stream: AsyncIterator[StreamPart]
    request: dict[str, Any] = field(default_factory=dict)
    response: ResponseInfo = field(default_factory=ResponseInfo)
