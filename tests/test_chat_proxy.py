import asyncio
import json
from types import SimpleNamespace

import httpx

from backend.app.services.chat import (
    FALLBACK_SUGGESTIONS,
    MAX_PROMPT_FAQS,
    ChatCompletionClient,
    build_system_prompt,
    fallback_reply,
)


def make_bot(**overrides):
    values = {
        "id": "bot-1",
        "name": "Helper",
        "ai_model": {"model": "gpt-4o-mini", "temperature": 0.2, "max_tokens": 120},
        "training_data": {
            "business_info": {"name": "Ann's Shop", "description": "Handmade goods"},
            "faqs": [{"question": "Open on Sunday?", "answer": "Yes, 10 to 4."}],
        },
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def make_client(handler) -> ChatCompletionClient:
    return ChatCompletionClient(
        api_key="sk-test",
        base_url="https://llm.example/v1/",
        transport=httpx.MockTransport(handler),
    )


def completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def test_unconfigured_client_returns_fallback():
    client = ChatCompletionClient(api_key="")
    reply = asyncio.run(client.respond("Hi", make_bot()))
    assert client.configured is False
    assert reply.text == "Thanks for your question about Helper. Our team will follow up shortly."
    assert reply.confidence == 0.5
    assert reply.resolved is False
    assert reply.suggestions == FALLBACK_SUGGESTIONS


def test_fallback_without_bot_name():
    assert "our services" in fallback_reply(None).text


def test_successful_completion():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json=completion("We open at 10."))

    reply = asyncio.run(make_client(handler).respond("When do you open?", make_bot()))

    assert reply.text == "We open at 10."
    assert reply.confidence == 0.8
    assert reply.resolved is True
    assert captured["url"] == "https://llm.example/v1/chat/completions"
    assert captured["auth"] == "Bearer sk-test"
    body = captured["body"]
    assert body["model"] == "gpt-4o-mini"
    assert body["temperature"] == 0.2
    assert body["max_tokens"] == 120
    assert body["messages"][0]["role"] == "system"
    assert "Ann's Shop" in body["messages"][0]["content"]
    assert body["messages"][1] == {"role": "user", "content": "When do you open?"}


def test_payload_defaults_when_model_unset():
    client = ChatCompletionClient(api_key="sk-test")
    payload = client.build_payload("Hi", make_bot(ai_model={}))
    assert payload["model"] == "gpt-3.5-turbo"
    assert payload["temperature"] == 0.7
    assert "max_tokens" not in payload


def test_upstream_error_status_returns_fallback():
    def handler(request):
        return httpx.Response(500, json={"error": "boom"})

    reply = asyncio.run(make_client(handler).respond("Hi", make_bot()))
    assert reply.resolved is False
    assert reply.confidence == 0.5


def test_transport_error_returns_fallback():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    reply = asyncio.run(make_client(handler).respond("Hi", make_bot()))
    assert reply.resolved is False


def test_malformed_bodies_return_fallback():
    bodies = [
        httpx.Response(200, json={"choices": []}),
        httpx.Response(200, json={"unexpected": True}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=completion("   ")),
    ]
    for body in bodies:
        reply = asyncio.run(make_client(lambda request, body=body: body).respond("Hi", make_bot()))
        assert reply.resolved is False
        assert reply.suggestions == FALLBACK_SUGGESTIONS


def test_system_prompt_caps_faqs():
    faqs = [{"question": f"Q{index}", "answer": f"A{index}"} for index in range(MAX_PROMPT_FAQS + 5)]
    prompt = build_system_prompt({"business_info": {"name": "Gym Nation"}, "faqs": faqs})
    assert "Gym Nation" in prompt
    assert "Q: Q19\nA: A19" in prompt
    assert "Q20" not in prompt


def test_system_prompt_without_training_data():
    prompt = build_system_prompt(None)
    assert prompt.startswith("You are an AI customer support assistant for a small business.")
