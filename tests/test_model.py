"""Unit tests for the backend gateway and its failure mapping."""

from __future__ import annotations

import asyncio

import httpx
import openai

from memory import MODEL, USER, Turn
from model import TEMPORARY_ERROR, TOO_MANY_REQUESTS, GenerationConfig, LLMGateway
from tests.fakes import FakeClient, StatusError


def _rate_limit_error() -> openai.RateLimitError:
    request = httpx.Request("POST", "https://backend.test/chat/completions")
    response = httpx.Response(429, request=request)
    return openai.RateLimitError("slow down", response=response, body=None)


def test_generate_sends_window_and_fixed_parameters() -> None:
    client = FakeClient(["answer"])
    gateway = LLMGateway(client=client, config=GenerationConfig("gemini-test", 500, 0.7))
    history = (Turn(USER, "hi"), Turn(MODEL, "hello"), Turn(USER, "how are you?"))

    result = asyncio.run(gateway.generate(history, "how are you?"))

    assert result.text == "answer"
    assert not result.failed
    call = client.calls[0]
    assert call["model"] == "gemini-test"
    assert call["max_tokens"] == 500
    assert call["temperature"] == 0.7
    assert call["messages"] == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
        {"role": "user", "content": "how are you?"},
    ]


def test_generate_appends_message_missing_from_window() -> None:
    client = FakeClient(["answer"])
    gateway = LLMGateway(client=client)

    asyncio.run(gateway.generate((), "first"))

    assert client.calls[0]["messages"] == [{"role": "user", "content": "first"}]


def test_generate_uses_constructor_config_only() -> None:
    client = FakeClient(["a", "b"])
    gateway = LLMGateway(client=client, config=GenerationConfig("fixed", 10, 0.1))

    asyncio.run(gateway.generate((), "q1"))
    asyncio.run(gateway.generate((), "q2"))

    assert [c["model"] for c in client.calls] == ["fixed", "fixed"]
    assert [c["max_tokens"] for c in client.calls] == [10, 10]


def test_rate_limit_error_maps_to_retry_later_text() -> None:
    gateway = LLMGateway(client=FakeClient([_rate_limit_error()]))

    result = asyncio.run(gateway.generate((), "q"))

    assert result.text == TOO_MANY_REQUESTS
    assert result.failed


def test_any_429_status_is_treated_as_rate_limit() -> None:
    gateway = LLMGateway(client=FakeClient([StatusError(429)]))
    assert asyncio.run(gateway.generate((), "q")).text == TOO_MANY_REQUESTS


def test_other_failures_map_to_generic_fallback() -> None:
    for err in (StatusError(500), RuntimeError("boom"), ConnectionError("down")):
        gateway = LLMGateway(client=FakeClient([err]))
        result = asyncio.run(gateway.generate((), "q"))
        assert result.text == TEMPORARY_ERROR
        assert result.failed


def test_close_closes_client() -> None:
    client = FakeClient()
    asyncio.run(LLMGateway(client=client).close())
    assert client.closed
