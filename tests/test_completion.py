from __future__ import annotations

import json
from types import SimpleNamespace

import anthropic
import httpx
import pytest

from movie_agent.core.completion import (
    AnthropicCompletionClient,
    BlockListContent,
    CompletionConfigError,
    TextContent,
    content_text,
    parse_content,
)
from movie_agent.core.config import Settings


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def _message(*blocks: dict) -> dict:
    return {
        "id": "msg_test",
        "type": "message",
        "role": "assistant",
        "model": "some-model",
        "content": list(blocks),
        "stop_reason": "end_turn",
        "stop_sequence": None,
        "usage": {"input_tokens": 1, "output_tokens": 1},
    }


def test_missing_api_key_fails_before_any_request() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=_message())

    with pytest.raises(CompletionConfigError):
        AnthropicCompletionClient.from_settings(Settings(), client=_client(handler))
    assert calls == []


def test_complete_sends_prompt_and_joins_text_blocks() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json=_message(
                {"type": "text", "text": "[{\"title\": "},
                {"type": "tool_use", "id": "toolu_1", "name": "noop", "input": {}},
                {"type": "text", "text": "\"Heat\"}]"},
            ),
        )

    client = AnthropicCompletionClient(
        api_key="sk-test", model="some-model", max_tokens=123, client=_client(handler)
    )
    text = client.complete("recommend something")

    assert text == '[{"title": "Heat"}]'
    assert seen["path"].endswith("/v1/messages")
    assert seen["headers"]["x-api-key"] == "sk-test"
    assert seen["body"]["model"] == "some-model"
    assert seen["body"]["max_tokens"] == 123
    assert seen["body"]["messages"] == [{"role": "user", "content": "recommend something"}]


def test_provider_error_status_is_not_retried() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(
            529, json={"type": "error", "error": {"type": "overloaded_error", "message": "busy"}}
        )

    client = AnthropicCompletionClient(
        api_key="sk-test", model="m", max_tokens=10, client=_client(handler)
    )
    with pytest.raises(anthropic.APIStatusError) as excinfo:
        client.complete("hi")
    assert excinfo.value.status_code == 529
    assert len(calls) == 1


def test_transport_errors_surface_as_connection_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    client = AnthropicCompletionClient(
        api_key="sk-test", model="m", max_tokens=10, client=_client(handler)
    )
    with pytest.raises(anthropic.APIConnectionError):
        client.complete("hi")


def test_content_union_covers_text_and_block_list() -> None:
    assert parse_content("plain") == TextContent("plain")
    assert isinstance(parse_content([{"type": "text", "text": "a"}]), BlockListContent)

    assert content_text(TextContent("plain")) == "plain"
    assert content_text(BlockListContent(("a", {"type": "text", "text": "b"}, {"x": 1}))) == "ab"
    assert content_text(parse_content(None)) == ""


def test_block_objects_are_read_by_attribute() -> None:
    blocks = [
        SimpleNamespace(type="text", text="[1, "),
        SimpleNamespace(type="tool_use", name="noop"),
        SimpleNamespace(type="text", text="2]"),
    ]
    assert content_text(parse_content(blocks)) == "[1, 2]"
