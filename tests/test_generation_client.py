import json

import httpx
import pytest

from lokalaku.core.exceptions import UpstreamDegraded
from lokalaku.services.generation_client import ChatCompletionsClient, extract_content


def envelope(content):
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}],
    }


def client_for(handler, **kwargs) -> ChatCompletionsClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    kwargs.setdefault("api_key", "sk-test")
    kwargs.setdefault("force_json", False)
    return ChatCompletionsClient(base_url="https://llm.test/v1", model="test-model", client=http, **kwargs)


@pytest.mark.asyncio
async def test_returns_message_content_and_sends_expected_request():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=envelope('{"recommendation": "Bakso"}'))

    content = await client_for(handler).complete("Suggest food", timeout=30, max_tokens=500)

    assert content == '{"recommendation": "Bakso"}'
    (request,) = seen
    assert request.method == "POST"
    assert request.url.path == "/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer sk-test"
    body = json.loads(request.content)
    assert body == {
        "model": "test-model",
        "messages": [{"role": "user", "content": "Suggest food"}],
        "max_tokens": 500,
    }


@pytest.mark.asyncio
async def test_force_json_asks_for_a_json_object():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json=envelope("{}"))

    await client_for(handler, force_json=True).complete("x", timeout=30, max_tokens=600)

    assert seen[0]["response_format"] == {"type": "json_object"}
    assert seen[0]["max_tokens"] == 600


@pytest.mark.asyncio
async def test_insufficient_balance_is_reported_as_degraded():
    client = client_for(lambda request: httpx.Response(402, json={"error": "insufficient_balance"}))

    with pytest.raises(UpstreamDegraded) as excinfo:
        await client.complete("x", timeout=30, max_tokens=500)

    assert excinfo.value.status_code == 402
    assert "insufficient_balance" in excinfo.value.reason


@pytest.mark.asyncio
async def test_structured_error_code_is_kept():
    client = client_for(
        lambda request: httpx.Response(429, json={"error": {"code": "rate_limited", "message": "slow down"}})
    )

    with pytest.raises(UpstreamDegraded) as excinfo:
        await client.complete("x", timeout=30, max_tokens=500)

    assert excinfo.value.status_code == 429
    assert excinfo.value.reason == "http status error: rate_limited"


@pytest.mark.asyncio
async def test_missing_api_key_raises_without_a_request():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=envelope("{}"))

    with pytest.raises(UpstreamDegraded):
        await client_for(handler, api_key="").complete("x", timeout=30, max_tokens=500)
    assert seen == []


@pytest.mark.asyncio
async def test_timeout_is_reported_as_degraded():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(UpstreamDegraded) as excinfo:
        await client_for(handler).complete("x", timeout=30, max_tokens=500)

    assert excinfo.value.reason == "timeout"


@pytest.mark.asyncio
async def test_non_json_body_is_reported_as_degraded():
    client = client_for(lambda request: httpx.Response(200, text="<html>gateway</html>"))

    with pytest.raises(UpstreamDegraded):
        await client.complete("x", timeout=30, max_tokens=500)


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"choices": []},
        {"choices": [{"message": {}}]},
        envelope(""),
        envelope("   "),
        envelope(None),
        [],
    ],
)
def test_bad_envelopes_are_rejected(data):
    with pytest.raises(UpstreamDegraded):
        extract_content(data)
