"""Unit tests for the chat-completion client."""

import json

import httpx
import pytest

from tool_relay.llm import ChatCompletionsClient, ProviderError

COMPLETION = {
    "id": "cmpl-1",
    "choices": [
        {"index": 0, "message": {"role": "assistant", "content": "Hi"}, "finish_reason": "stop"}
    ],
}


def make_client(handler) -> ChatCompletionsClient:
    return ChatCompletionsClient(
        base_url="http://provider.test/v1/",
        api_key="secret",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_create_posts_to_chat_completions():
    """Test the request URL, auth header and body."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=COMPLETION)

    client = make_client(handler)
    body = {"model": "m", "messages": [{"role": "user", "content": "Hello"}]}

    result = await client.create(body)
    await client.close()

    assert result == COMPLETION
    assert seen["url"] == "http://provider.test/v1/chat/completions"
    assert seen["auth"] == "Bearer secret"
    assert seen["body"] == body


@pytest.mark.asyncio
async def test_error_payload_raises_provider_error():
    """Test that an error member is raised with its fields."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json={
                "error": {
                    "message": "Invalid model",
                    "code": "model_not_found",
                    "type": "invalid_request_error",
                    "param": "model",
                }
            },
        )

    client = make_client(handler)

    with pytest.raises(ProviderError) as exc_info:
        await client.create({"model": "nope", "messages": []})

    error = exc_info.value
    assert error.message == "Invalid model"
    assert error.code == "model_not_found"
    assert error.type == "invalid_request_error"
    assert error.param == "model"
    assert error.status_code == 400


@pytest.mark.asyncio
async def test_error_payload_with_ok_status():
    """Test that an error payload fails the call even with HTTP 200."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"error": {"messages": "quota exceeded"}})

    client = make_client(handler)

    with pytest.raises(ProviderError, match="quota exceeded"):
        await client.create({"model": "m", "messages": []})


@pytest.mark.asyncio
async def test_non_json_error_status():
    """Test that a non-JSON error body becomes a ProviderError."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="Service Unavailable")

    client = make_client(handler)

    with pytest.raises(ProviderError) as exc_info:
        await client.create({"model": "m", "messages": []})

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_transport_errors_propagate():
    """Test that connection failures are not wrapped or retried."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ConnectError("refused", request=request)

    client = make_client(handler)

    with pytest.raises(httpx.ConnectError):
        await client.create({"model": "m", "messages": []})
    assert len(calls) == 1


def test_provider_error_from_string_payload():
    """Test that a bare string error is accepted."""
    error = ProviderError.from_payload("boom", status_code=500)

    assert error.message == "boom"
    assert error.code is None
    assert error.details()["status_code"] == 500
