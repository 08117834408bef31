import pytest


class SettingsStub:
    groq_api_key = "groq-key-123456"
    hf_api_key = "hf-key-123456"
    openrouter_api_key = "or-key-123456"
    search_api_key = None
    default_model = "g:llama-3.3-70b-versatile"
    daily_request_limit = 0
    app_url = "https://example.test"
    app_title = "Test App"


class Resp:
    def __init__(self, status_code=200, data=None, text=""):
        self.status_code = status_code
        self._data = data
        self.text = text

    def json(self):
        return self._data


def chat_completion(content):
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def fake_http(monkeypatch):
    """把 httpx.AsyncClient 换成假的实现。

    用法：fake_http(handler)，handler(url, json, headers) 返回 Resp 或抛异常，
    也可以是协程函数。返回的列表按顺序记录每次 post 的 (url, json, headers)。
    """

    calls = []

    def install(handler):
        class Client:
            def __init__(self, *a, **kw):
                pass

            async def __aenter__(self):
                return self

            async def __aexit__(self, *a):
                return False

            async def post(self, url, json=None, headers=None, **_):
                calls.append((url, json, headers))
                result = handler(url, json, headers)
                if hasattr(result, "__await__"):
                    result = await result
                return result

        monkeypatch.setattr("httpx.AsyncClient", Client)
        return calls

    return install


class FakeProvider:
    """记录调用顺序的假 Provider；outcome 为异常时抛出，否则作为回答返回。"""

    def __init__(self, name, outcome, log=None):
        self.name = name
        self.outcome = outcome
        self.calls = []
        self._log = log if log is not None else []

    async def call(self, messages, model_id, api_key=None):
        self.calls.append({"messages": list(messages), "model": model_id, "key": api_key})
        self._log.append(self.name)
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


class FakeSearch:
    name = "search"

    def __init__(self, outcome):
        self.outcome = outcome
        self.queries = []

    async def search(self, query, api_key):
        self.queries.append((query, api_key))
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome
