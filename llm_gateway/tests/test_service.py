import asyncio

import pytest

from conftest import FakeProvider, FakeSearch, Resp, SettingsStub, chat_completion
from llm_gateway.api.service import ChatService, last_user_message, parse_request
from llm_gateway.domain.exceptions import (
    AllProvidersFailedError,
    RateLimitError,
    UnauthorizedError,
    ValidationError,
)
from llm_gateway.domain.models import ChatMessage, Citation, ProviderKind
from llm_gateway.prompts import CHAT_SYSTEM, load_system_prompt


KINDS = [ProviderKind.GROQ, ProviderKind.HUGGINGFACE, ProviderKind.OPENROUTER]


def make_service(outcomes, search_outcome=None, cfg=None):
    log = []
    clients = {k: FakeProvider(k.value, o, log) for k, o in zip(KINDS, outcomes)}
    search = FakeSearch(search_outcome if search_outcome is not None else [])
    service = ChatService(cfg or SettingsStub(), clients=clients, search_client=search)
    return service, clients, search, log


@pytest.mark.parametrize(
    "payload",
    [
        None,
        [],
        {},
        {"messages": []},
        {"messages": "hi"},
        {"messages": [{"role": "robot", "content": "hi"}]},
        {"messages": [{"role": "user"}]},
    ],
)
def test_parse_request_rejects_malformed(payload):
    with pytest.raises(ValidationError):
        parse_request(payload)


def test_invalid_request_makes_no_calls():
    service, _, search, log = make_service(["a", "b", "c"])
    status, body = asyncio.run(service.respond({"messages": [], "model": "g:x"}))
    assert status == 400
    assert body["code"] == "INVALID_REQUEST"
    assert log == []
    assert search.queries == []


def test_direct_call_prepends_system_prompt_and_keeps_order():
    service, clients, _, log = make_service(["groq says", "b", "c"])
    payload = {
        "messages": [
            {"role": "user", "content": "one"},
            {"role": "assistant", "content": "two"},
            {"role": "user", "content": "three"},
        ],
        "model": "g:llama-3.1-8b-instant",
    }
    reply = asyncio.run(service.handle(payload))
    assert reply.content == "groq says"
    assert reply.fallback is False
    assert reply.citations is None
    call = clients[ProviderKind.GROQ].calls[0]
    assert call["model"] == "llama-3.1-8b-instant"
    assert call["messages"][0] == ChatMessage(role="system", content=load_system_prompt(CHAT_SYSTEM))
    assert [m.content for m in call["messages"][1:]] == ["one", "two", "three"]
    assert log == ["groq"]


def test_direct_call_to_secondary_provider():
    service, clients, _, log = make_service(["a", "hf answer", "c"])
    reply = asyncio.run(
        service.handle({"messages": [{"role": "user", "content": "hi"}], "model": "hf:Qwen/QwQ-32B"})
    )
    assert reply.content == "hf answer"
    assert reply.provider == "huggingface"
    assert clients[ProviderKind.HUGGINGFACE].calls[0]["model"] == "Qwen/QwQ-32B"
    assert log == ["huggingface"]


def test_missing_model_uses_default_selector():
    service, clients, _, _ = make_service(["a", "b", "c"])
    asyncio.run(service.handle({"messages": [{"role": "user", "content": "hi"}]}))
    assert clients[ProviderKind.GROQ].calls[0]["model"] == "llama-3.3-70b-versatile"


def test_unprefixed_model_goes_to_primary():
    service, clients, _, _ = make_service(["a", "b", "c"])
    asyncio.run(service.handle({"messages": [{"role": "user", "content": "hi"}], "model": "mixtral-8x7b-32768"}))
    assert clients[ProviderKind.GROQ].calls[0]["model"] == "mixtral-8x7b-32768"


def test_direct_failure_falls_back_to_full_chain():
    service, clients, _, log = make_service([UnauthorizedError(message="bad key"), "ok", "c"])
    reply = asyncio.run(
        service.handle({"messages": [{"role": "user", "content": "hi"}], "model": "g:llama-3.3-70b-versatile"})
    )
    # 直连 groq 失败，回退链从 groq（默认模型）重新开始
    assert log == ["groq", "groq", "huggingface"]
    assert reply.content == "ok"
    assert reply.provider == "huggingface"
    assert reply.fallback is True


def test_direct_failure_on_model_retries_default_model():
    class FailsOnlyCustomModel(FakeProvider):
        async def call(self, messages, model_id, api_key=None):
            self.calls.append({"model": model_id})
            if model_id == "broken-model":
                raise RateLimitError(message="busy")
            return "default model answer"

    service, clients, _, _ = make_service(["a", "b", "c"])
    clients[ProviderKind.GROQ] = FailsOnlyCustomModel("groq", None)
    service = ChatService(SettingsStub(), clients=clients, search_client=FakeSearch([]))
    reply = asyncio.run(service.handle({"messages": [{"role": "user", "content": "hi"}], "model": "g:broken-model"}))
    assert reply.content == "default model answer"
    assert [c["model"] for c in clients[ProviderKind.GROQ].calls] == ["broken-model", "llama-3.3-70b-versatile"]
    assert reply.fallback is False


def test_everything_failing_maps_to_all_failed():
    failures = [RateLimitError(message="busy")] * 3
    service, _, _, log = make_service(failures)
    with pytest.raises(AllProvidersFailedError):
        asyncio.run(service.handle({"messages": [{"role": "user", "content": "hi"}], "model": "or:x"}))
    status, body = asyncio.run(service.respond({"messages": [{"role": "user", "content": "hi"}], "model": "or:x"}))
    assert status == 500
    assert body["code"] == "ALL_FAILED"
    assert "busy" not in body["error"]


def test_no_keys_anywhere_maps_to_api_key_missing():
    class NoKeys(SettingsStub):
        groq_api_key = None
        hf_api_key = None
        openrouter_api_key = None

    service, _, _, _ = make_service(["a", "b", "c"], cfg=NoKeys())
    status, body = asyncio.run(service.respond({"messages": [{"role": "user", "content": "hi"}]}))
    assert status == 500
    assert body["code"] == "API_KEY_MISSING"


def test_search_mode_uses_last_user_message():
    class WithSearchKey(SettingsStub):
        search_api_key = "serper-key-123456"

    citations = [Citation(title="T", url="https://t.example", snippet="s")]
    service, _, search, _ = make_service(["summary [1]", "b", "c"], search_outcome=citations, cfg=WithSearchKey())
    payload = {
        "messages": [
            {"role": "user", "content": "first question"},
            {"role": "assistant", "content": "answer"},
            {"role": "user", "content": "latest question"},
            {"role": "assistant", "content": "trailing"},
        ],
        "model": "web:web-search",
    }
    status, body = asyncio.run(service.respond(payload))
    assert status == 200
    assert search.queries == [("latest question", "serper-key-123456")]
    assert body["content"] == "summary [1]"
    assert body["citations"] == [{"title": "T", "url": "https://t.example", "snippet": "s"}]
    assert "provider" not in body


def test_search_mode_without_key_returns_empty_citations():
    service, _, search, _ = make_service(["a", "b", "c"])
    status, body = asyncio.run(
        service.respond({"messages": [{"role": "user", "content": "news?"}], "model": "web:web-search"})
    )
    assert status == 200
    assert body["citations"] == []
    assert body["content"]
    assert search.queries == []


def test_last_user_message():
    assert last_user_message([ChatMessage(role="assistant", content="x")]) == ""
    msgs = [ChatMessage(role="user", content="a"), ChatMessage(role="user", content="b")]
    assert last_user_message(msgs) == "b"


def test_real_adapters_primary_401_secondary_ok(fake_http):
    def route(url, json, headers):
        if "groq.com" in url:
            return Resp(status_code=401, text="invalid key")
        if "huggingface.co" in url:
            return Resp(data=chat_completion("ok"))
        raise AssertionError(f"unexpected call to {url}")

    calls = fake_http(route)
    service = ChatService(SettingsStub(), search_client=FakeSearch([]))
    status, body = asyncio.run(
        service.respond({"messages": [{"role": "user", "content": "hi"}], "model": "g:llama-3.3-70b-versatile"})
    )
    assert status == 200
    assert body == {"content": "ok", "provider": "huggingface", "fallback": True}
    assert [url.split("/")[2] for url, _, _ in calls] == [
        "api.groq.com",
        "api.groq.com",
        "router.huggingface.co",
    ]
