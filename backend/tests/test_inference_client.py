"""
Tests for the Ollama inference client
"""
import json

import httpx
import pytest

from budget_app.core.config import Settings
from budget_app.core.inference_client import InferenceClient, InferenceError


def make_client(handler, **overrides):
    settings = Settings(
        ollama_url="http://ollama.test/v1/",
        ollama_model="test-model",
        llm_max_retries=1,
        **overrides,
    )
    return InferenceClient(settings=settings, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_chat_sends_system_and_user_messages():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["payload"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"model": "test-model", "message": {"role": "assistant", "content": "Raise dues."}, "done": True},
        )

    client = make_client(handler, llm_temperature=0.2)
    result = await client.chat("What now?", system_prompt="Be brief.")
    await client.close()

    assert result.response == "Raise dues."
    assert result.done is True
    assert seen["url"] == "http://ollama.test/api/chat"
    payload = seen["payload"]
    assert payload["model"] == "test-model"
    assert payload["stream"] is False
    assert payload["options"]["temperature"] == 0.2
    assert payload["messages"] == [
        {"role": "system", "content": "Be brief."},
        {"role": "user", "content": "What now?"},
    ]


@pytest.mark.asyncio
async def test_missing_message_content_yields_none():
    client = make_client(lambda request: httpx.Response(200, json={"model": "test-model", "done": True}))
    result = await client.chat("hi")
    await client.close()

    assert result.response is None


@pytest.mark.asyncio
async def test_http_error_status_raises():
    client = make_client(lambda request: httpx.Response(500, text="model not loaded"))

    with pytest.raises(InferenceError, match="500"):
        await client.chat("hi")
    await client.close()


@pytest.mark.asyncio
async def test_non_json_response_raises():
    client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(InferenceError, match="Malformed"):
        await client.chat("hi")
    await client.close()


@pytest.mark.asyncio
async def test_connection_error_raises_after_retries():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)

    with pytest.raises(InferenceError, match="after 1 attempts"):
        await client.chat("hi")
    await client.close()

    assert len(attempts) == 1
