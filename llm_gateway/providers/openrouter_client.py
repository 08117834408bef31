"""OpenRouter Provider 适配器（第三 LLM 后端）。

OpenRouter 要求附带来源标识头（HTTP-Referer / X-Title），取自配置的
app_url 与 app_title。
"""

from typing import Dict

from llm_gateway.providers.chat_completions import ChatCompletionsClient
from llm_gateway.providers.registry import OPENROUTER_CONFIG


class OpenRouterClient(ChatCompletionsClient):
    name = "openrouter"
    config = OPENROUTER_CONFIG
    base_url_setting = "openrouter_base_url"
    unauthorized_statuses = (401, 403)

    def _headers(self, api_key: str) -> Dict[str, str]:
        headers = super()._headers(api_key)
        headers["HTTP-Referer"] = getattr(self._settings, "app_url", None) or "https://genz-ai.vercel.app"
        headers["X-Title"] = getattr(self._settings, "app_title", None) or "GenZ AI"
        return headers
