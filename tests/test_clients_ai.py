import asyncio
import json

import httpx
import pytest

from tests.conftest import FUNCTIONS_URL


@pytest.mark.asyncio
async def test_providers_and_prompts_are_public(make_client):
    client, rec = make_client(httpx.Response(200, json={"providers": []}), credentials="T")
    await client.ai.get_ai_providers()
    assert str(rec.last.url) == f"{FUNCTIONS_URL}/ai-providers"
    assert "authorization" not in rec.last.headers
    await client.ai.get_system_prompts()
    assert str(rec.last.url) == f"{FUNCTIONS_URL}/system-prompts"
    assert "authorization" not in rec.last.headers
    await client.aclose()


@pytest.mark.asyncio
async def test_send_chat_message(make_client):
    client, rec = make_client(httpx.Response(200, json={"id": "m1"}), credentials="T")
    result = await client.ai.send_chat_message({"message": "hi", "providerId": "p"})
    assert result.data == {"id": "m1"}
    assert rec.last.method == "POST"
    assert rec.last_json() == {"message": "hi", "providerId": "p"}
    assert rec.last.headers["authorization"] == "Bearer T"
    await client.aclose()


@pytest.mark.asyncio
async def test_chat_history_with_and_without_org(make_client):
    client, rec = make_client(httpx.Response(200, json=[]))
    await client.ai.get_chat_history(token="tk")
    assert str(rec.last.url) == f"{FUNCTIONS_URL}/chat-history"
    assert rec.last.headers["authorization"] == "Bearer tk"
    await client.ai.get_chat_history(token="tk", organization_id="org1")
    assert rec.last.url.params["organizationId"] == "org1"
    await client.aclose()


@pytest.mark.asyncio
async def test_chat_details_requires_chat_id(make_client):
    client, rec = make_client()
    result = await client.ai.get_chat_with_messages("")
    assert result.status == 400
    assert result.error.message == "Chat ID is required"
    assert rec.requests == []
    await client.ai.get_chat_with_messages("c1", organization_id="o1")
    assert rec.last.url.path.endswith("/chat-details/c1")
    assert rec.last.url.params["organizationId"] == "o1"
    await client.aclose()


@pytest.mark.asyncio
async def test_delete_chat(make_client):
    client, rec = make_client(httpx.Response(204))
    result = await client.ai.delete_chat("c1")
    assert result.status == 204
    assert rec.last.method == "DELETE"
    assert rec.last.url.path.endswith("/chat/c1")
    await client.aclose()


@pytest.mark.asyncio
async def test_stream_chat_delivers_frames_and_stops_after_complete(make_client):
    frames = [
        {"type": "chat_start", "chatId": "c1"},
        {"type": "content_chunk", "content": "Hel"},
        {"type": "unexpected"},
        {"type": "content_chunk", "content": "lo"},
        {"type": "chat_complete", "assistantMessage": {"content": "Hello"}},
        {"type": "content_chunk", "content": "late"},
    ]
    body = "".join(f"data: {json.dumps(f)}\n\n" for f in frames).encode()
    client, rec = make_client(httpx.Response(200, content=body), credentials="T")
    received = []
    errors = []

    disconnect = client.ai.stream_chat({"message": "hi"}, received.append, errors.append)
    assert disconnect is not None
    for _ in range(200):
        if received and received[-1]["type"] == "chat_complete":
            break
        await asyncio.sleep(0.005)

    assert [f["type"] for f in received] == ["chat_start", "content_chunk", "content_chunk", "chat_complete"]
    assert errors == []
    assert json.loads(rec.last.content) == {"message": "hi", "stream": True}
    assert rec.last.url.path.endswith("/chat")
    assert not client.streams.is_active("chat:new")
    await client.aclose()
