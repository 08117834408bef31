"""Serper 搜索后端适配器。

请求：POST {"q": query, "num": 5}，认证头为 X-API-KEY。
响应中的 organic 字段是按排名排序的 {title, link, snippet} 列表，
这里原样保序转换为 Citation。
"""

import asyncio
from typing import Any, List

import httpx

from llm_gateway.config.settings import settings
from llm_gateway.domain.exceptions import (
    MissingKeyError,
    NetworkError,
    RequestTimeoutError,
    SearchError,
)
from llm_gateway.domain.models import Citation
from llm_gateway.infrastructure.logging.logger import logger
from llm_gateway.providers.registry import SEARCH_RESULT_COUNT, SEARCH_TIMEOUT, SEARCH_URL


class SerperClient:
    name = "search"

    def __init__(self, cfg=settings, timeout: float = SEARCH_TIMEOUT, num: int = SEARCH_RESULT_COUNT):
        self._settings = cfg
        self._timeout = timeout
        self._num = num

    async def search(self, query: str, api_key: str) -> List[Citation]:
        if not api_key:
            raise MissingKeyError(message="Search API key not available", provider=self.name)
        url = getattr(self._settings, "search_url", None) or SEARCH_URL
        logger.info("search.request", extra={"extra": {"num": self._num}})
        try:
            resp = await asyncio.wait_for(self._post(url, query, api_key), timeout=self._timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            raise RequestTimeoutError(message="Search timed out", provider=self.name)
        except httpx.RequestError as e:
            raise NetworkError(message=str(e), provider=self.name)
        if not 200 <= resp.status_code < 300:
            raise SearchError(
                message="Search service temporarily unavailable",
                provider=self.name,
                upstream_status=resp.status_code,
            )
        return self._parse_results(resp.json())

    async def _post(self, url: str, query: str, api_key: str) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self._timeout, trust_env=False) as client:
            return await client.post(
                url,
                json={"q": query, "num": self._num},
                headers={
                    "X-API-KEY": api_key,
                    "Content-Type": "application/json",
                },
            )

    def _parse_results(self, data: Any) -> List[Citation]:
        organic = data.get("organic") if isinstance(data, dict) else None
        citations: List[Citation] = []
        for item in (organic or [])[: self._num]:
            if not isinstance(item, dict):
                continue
            citations.append(
                Citation(
                    title=item.get("title") or "",
                    url=item.get("link") or "",
                    snippet=item.get("snippet") or "",
                )
            )
        return citations
