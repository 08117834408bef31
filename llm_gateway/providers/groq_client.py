"""Groq Provider 适配器（主 LLM 后端）。

Groq 只把 401 当作鉴权失败，403 等其余状态码统一按 ApiError 处理。
"""

from llm_gateway.providers.chat_completions import ChatCompletionsClient
from llm_gateway.providers.registry import GROQ_CONFIG


class GroqClient(ChatCompletionsClient):
    name = "groq"
    config = GROQ_CONFIG
    base_url_setting = "groq_base_url"
    unauthorized_statuses = (401,)
