"""OpenAI 兼容 chat/completions 适配器的公共实现。

三个 LLM 后端的接口形状几乎一致：
- URL: {base_url}/chat/completions
- 认证: Authorization: Bearer <api_key>
- 请求体: model / messages / max_tokens / temperature
- 响应: choices[0].message.content

本模块负责：

1. 将 ChatMessage 列表转换为请求 JSON。
2. 在硬性截止时间内发送请求；到期即取消，抛出 RequestTimeoutError。
3. 按 HTTP 状态码抛出对应的分类异常。
4. 从响应中取出第一条回答；结构缺失时返回固定占位文本。

子类只需声明 config / 鉴权失败状态码，必要时覆盖 _headers 或 _raise_for_status。
"""

import asyncio
from typing import Any, Dict, Optional, Sequence, Tuple

import httpx

from llm_gateway.config.settings import settings
from llm_gateway.domain.exceptions import (
    ApiError,
    MissingKeyError,
    NetworkError,
    RateLimitError,
    RequestTimeoutError,
    UnauthorizedError,
)
from llm_gateway.domain.models import ChatMessage
from llm_gateway.infrastructure.logging.logger import logger
from llm_gateway.providers.registry import ProviderConfig


NO_RESPONSE = "No response generated"


class ChatCompletionsClient:
    """chat/completions 风格 Provider 的基类。"""

    name: str = ""
    config: ProviderConfig
    # settings 上覆盖 base_url 的字段名
    base_url_setting: str = ""
    unauthorized_statuses: Tuple[int, ...] = (401,)

    def __init__(self, cfg=settings):
        self._settings = cfg

    async def call(
        self,
        messages: Sequence[ChatMessage],
        model_id: str,
        api_key: Optional[str] = None,
    ) -> str:
        """执行一次非流式调用，返回回答文本。"""

        if not api_key:
            raise MissingKeyError(
                message=f"{self.config.label} API key not available", provider=self.name
            )
        payload = self._build_payload(messages, model_id)
        logger.info(
            "provider.call.start",
            extra={"extra": {"provider": self.name, "model": model_id, "messages": len(messages)}},
        )
        try:
            resp = await asyncio.wait_for(
                self._post(payload, api_key), timeout=self.config.timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning("provider.call.failed", extra={"extra": {"provider": self.name, "code": "TIMEOUT"}})
            raise RequestTimeoutError(message="Request timed out", provider=self.name)
        except httpx.RequestError as e:
            # DNS 失败、连接被拒绝等
            logger.warning("provider.call.failed", extra={"extra": {"provider": self.name, "code": "NETWORK_ERROR"}})
            raise NetworkError(message=str(e), provider=self.name)
        self._raise_for_status(resp)
        content = self._parse_response(resp.json())
        logger.info("provider.call.ok", extra={"extra": {"provider": self.name, "chars": len(content)}})
        return content

    @property
    def endpoint(self) -> str:
        base = getattr(self._settings, self.base_url_setting, None) or self.config.base_url
        return f"{base.rstrip('/')}/chat/completions"

    async def _post(self, payload: Dict[str, Any], api_key: str) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.config.timeout, trust_env=False) as client:
            return await client.post(self.endpoint, json=payload, headers=self._headers(api_key))

    def _headers(self, api_key: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def _build_payload(self, messages: Sequence[ChatMessage], model_id: str) -> Dict[str, Any]:
        """将消息列表转成请求 JSON，只保留 role/content 两个字段。"""

        return {
            "model": model_id,
            "messages": [m.to_payload() for m in messages],
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
        }

    def _raise_for_status(self, resp: httpx.Response) -> None:
        status = resp.status_code
        if 200 <= status < 300:
            return
        logger.warning("provider.call.failed", extra={"extra": {"provider": self.name, "status": status}})
        if status == 429:
            raise RateLimitError(message="Rate limit exceeded", provider=self.name)
        if status in self.unauthorized_statuses:
            raise UnauthorizedError(message="Invalid API key", provider=self.name)
        raise ApiError(message=resp.text, provider=self.name, upstream_status=status)

    @staticmethod
    def _parse_response(data: Any) -> str:
        """取第一条 choice 的 message.content；结构缺失或为空时返回占位文本。"""

        if not isinstance(data, dict):
            return NO_RESPONSE
        choices = data.get("choices") or []
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return NO_RESPONSE
        message = choices[0].get("message")
        if not isinstance(message, dict):
            return NO_RESPONSE
        content = message.get("content")
        if not isinstance(content, str) or not content:
            return NO_RESPONSE
        return content
