import json

import pytest

from helicone_provider.errors import UnsupportedFunctionalityError
from helicone_provider.llm.metadata import ExtraBody
from helicone_provider.llm.request import build_body, build_headers, build_request
from helicone_provider.llm.types import CallOptions


def _options(**kwargs) -> CallOptions:
    data = {"prompt": [{"role": "user", "content": [{"type": "text", "text": "Hi"}]}]}
    data.update(kwargs)
    return CallOptions.model_validate(data)


def test_url_and_auth_header():
    req = build_request(
        base_url="https://x",
        api_key="k",
        model_id="gpt-4o",
        options=_options(),
        stream=False,
    )
    assert req.url == "https://x/v1/chat/completions"
    assert req.headers["Authorization"] == "Bearer k"
    assert req.headers["Content-Type"] == "application/json"


def test_trailing_slash_in_base_url_is_ignored():
    req = build_request(
        base_url="https://x/", api_key="k", model_id="m", options=_options(), stream=False
    )
    assert req.url == "https://x/v1/chat/completions"


def test_model_id_with_provider_suffix_is_sent_verbatim():
    body, _ = build_body("claude-3.5-sonnet/anthropic", _options(), stream=False)
    assert body["model"] == "claude-3.5-sonnet/anthropic"


def test_minimal_body_shape():
    body, warnings = build_body("gpt-4o", _options(), stream=True)
    assert body == {
        "model": "gpt-4o",
        "messages": [{"role": "user", "content": "Hi"}],
        "stream": True,
    }
    assert warnings == []


def test_conversation_is_flattened():
    options = CallOptions.model_validate(
        {
            "prompt": [
                {"role": "system", "content": "Be brief."},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": "Weather in "},
                        {"type": "text", "text": "Paris?"},
                    ],
                },
                {
                    "role": "assistant",
                    "content": [
                        {"type": "reasoning", "text": "need a tool"},
                        {"type": "text", "text": "Checking."},
                        {
                            "type": "tool-call",
                            "tool_call_id": "call_1",
                            "tool_name": "weather",
                            "input": {"city": "Paris"},
                        },
                    ],
                },
                {
                    "role": "tool",
                    "content": [
                        {
                            "type": "tool-result",
                            "tool_call_id": "call_1",
                            "tool_name": "weather",
                            "output": {"temp": 21},
                        }
                    ],
                },
            ]
        }
    )
    body, _ = build_body("gpt-4o", options, stream=False)
    assert body["messages"] == [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "Weather in Paris?"},
        {
            "role": "assistant",
            "content": "Checking.",
            "tool_calls": [
                {
                    "id": "call_1",
                    "type": "function",
                    "function": {"name": "weather", "arguments": '{"city": "Paris"}'},
                }
            ],
        },
        {"role": "tool", "tool_call_id": "call_1", "content": '{"temp": 21}'},
    ]


def test_image_parts_switch_user_content_to_list():
    options = _options(
        prompt=[
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "What is this?"},
                    {"type": "file", "media_type": "image/png", "data": b"\x89PNG"},
                    {
                        "type": "file",
                        "media_type": "image/jpeg",
                        "data": "https://example.com/cat.jpg",
                    },
                ],
            }
        ]
    )
    body, _ = build_body("gpt-4o", options, stream=False)
    assert body["messages"][0]["content"] == [
        {"type": "text", "text": "What is this?"},
        {"type": "image_url", "image_url": {"url": "data:image/png;base64,iVBORw=="}},
        {"type": "image_url", "image_url": {"url": "https://example.com/cat.jpg"}},
    ]


def test_non_image_files_are_rejected():
    options = _options(
        prompt=[
            {
                "role": "user",
                "content": [
                    {"type": "file", "media_type": "application/pdf", "data": "JVBER"}
                ],
            }
        ]
    )
    with pytest.raises(UnsupportedFunctionalityError):
        build_body("gpt-4o", options, stream=False)


def test_tools_and_tool_choice_are_translated():
    schema = {
        "type": "object",
        "properties": {"query": {"type": "string"}},
        "required": ["query"],
    }
    options = _options(
        tools=[
            {
                "type": "function",
                "name": "explore_knowledge_base",
                "description": "Search the knowledge base",
                "input_schema": schema,
            }
        ],
        tool_choice={"type": "tool", "tool_name": "explore_knowledge_base"},
    )
    body, _ = build_body("gpt-4o", options, stream=False)
    assert body["tools"] == [
        {
            "type": "function",
            "function": {
                "name": "explore_knowledge_base",
                "description": "Search the knowledge base",
                "parameters": schema,
            },
        }
    ]
    assert body["tool_choice"] == {
        "type": "function",
        "function": {"name": "explore_knowledge_base"},
    }


def test_sampling_settings_and_unsupported_top_k():
    options = _options(
        max_output_tokens=256,
        temperature=0.2,
        top_p=0.9,
        top_k=40,
        frequency_penalty=0.1,
        presence_penalty=0.3,
        stop_sequences=["END"],
        seed=7,
    )
    body, warnings = build_body("gpt-4o", options, stream=False)
    assert body["max_tokens"] == 256
    assert body["temperature"] == 0.2
    assert body["top_p"] == 0.9
    assert body["frequency_penalty"] == 0.1
    assert body["presence_penalty"] == 0.3
    assert body["stop"] == ["END"]
    assert body["seed"] == 7
    assert "top_k" not in body
    assert [(w.type, w.setting) for w in warnings] == [("unsupported-setting", "top_k")]


def test_json_response_formats():
    body, _ = build_body(
        "gpt-4o", _options(response_format={"type": "json"}), stream=False
    )
    assert body["response_format"] == {"type": "json_object"}

    schema = {"type": "object", "properties": {"a": {"type": "string"}}}
    body, _ = build_body(
        "gpt-4o",
        _options(response_format={"type": "json", "schema": schema, "name": "answer"}),
        stream=False,
    )
    assert body["response_format"] == {
        "type": "json_schema",
        "json_schema": {"name": "answer", "schema": schema},
    }


def test_reserved_key_never_reaches_body_and_siblings_pass_through():
    extra = ExtraBody.model_validate(
        {
            "helicone": {"sessionId": "s", "unknown": "x"},
            "customField": "customValue",
            "anotherField": 42,
        }
    )
    req = build_request(
        base_url="https://x",
        api_key="k",
        model_id="gpt-4o",
        options=_options(),
        stream=False,
        extra_body=extra,
    )
    assert "helicone" not in req.body
    assert req.body["customField"] == "customValue"
    assert req.body["anotherField"] == 42
    assert "helicone" not in json.loads(req.to_httpx().content)


def test_header_precedence():
    extra = ExtraBody.model_validate({"helicone": {"userId": "from-metadata"}})
    headers = build_headers(
        "k",
        static_headers={"X-Custom-Header": "static", "Helicone-User-Id": "static"},
        call_headers={"X-Custom-Header": "call"},
        extra_body=extra,
    )
    assert headers["X-Custom-Header"] == "call"
    assert headers["Helicone-User-Id"] == "from-metadata"
    assert headers["Authorization"] == "Bearer k"


def test_httpx_request_is_a_json_post():
    req = build_request(
        base_url="https://x", api_key="k", model_id="m", options=_options(), stream=False
    )
    http_request = req.to_httpx()
    assert http_request.method == "POST"
    assert str(http_request.url) == "https://x/v1/chat/completions"
    assert json.loads(http_request.content) == req.body
