"""搜索增强回答流程。

run(query, credentials) 永远返回可渲染的 SearchAnswer，从不向调用方抛异常：

- 没有搜索密钥：返回固定的“不可用”提示，citations 为空，不发请求。
- 搜索成功：取前 N 条结果生成 citations 和编号上下文，交给
  FallbackOrchestrator 做一次总结；总结失败时退化为直接返回原始上下文，
  citations 仍然保留。
- 搜索本身失败（超时、网络、非 2xx）：返回道歉文本，citations 为空。
"""

from typing import List, Sequence

from llm_gateway.domain.exceptions import RequestTimeoutError
from llm_gateway.domain.models import ChatMessage, Citation, Credentials, ProviderKind, SearchAnswer
from llm_gateway.flows.fallback import FallbackOrchestrator
from llm_gateway.infrastructure.logging.logger import logger
from llm_gateway.prompts import SEARCH_SUMMARY_SYSTEM, load_system_prompt
from llm_gateway.providers.base import SearchClient


SEARCH_UNAVAILABLE = (
    "Web search is not available right now. "
    "Please try again later or add your Serper API key in Settings."
)
SEARCH_TIMED_OUT = "I couldn't complete the web search right now. The search took too long."
SEARCH_FAILED = "I couldn't complete the web search right now. Please try again in a moment."


def build_context(citations: Sequence[Citation]) -> str:
    """生成编号上下文：每条为 "[n] 标题\\n摘要"，条目之间空一行。"""

    return "\n\n".join(f"[{i}] {c.title}\n{c.snippet}" for i, c in enumerate(citations, start=1))


def build_summary_messages(query: str, context: str) -> List[ChatMessage]:
    return [
        ChatMessage(role="system", content=load_system_prompt(SEARCH_SUMMARY_SYSTEM)),
        ChatMessage(role="user", content=f"Question: {query}\n\nSearch Results:\n{context}"),
    ]


class SearchPipeline:
    def __init__(self, search_client: SearchClient, orchestrator: FallbackOrchestrator):
        self._search_client = search_client
        self._orchestrator = orchestrator

    async def run(self, query: str, credentials: Credentials) -> SearchAnswer:
        api_key = credentials.resolve(ProviderKind.SEARCH)
        if not api_key:
            logger.info("search.unavailable")
            return SearchAnswer(content=SEARCH_UNAVAILABLE, citations=[])

        try:
            citations = await self._search_client.search(query, api_key)
        except RequestTimeoutError:
            logger.warning("search.failed", extra={"extra": {"code": "TIMEOUT"}})
            return SearchAnswer(content=SEARCH_TIMED_OUT, citations=[])
        except Exception as e:
            logger.warning("search.failed", extra={"extra": {"error": str(e)}})
            return SearchAnswer(content=SEARCH_FAILED, citations=[])

        context = build_context(citations)
        try:
            result = await self._orchestrator.call_with_fallback(
                build_summary_messages(query, context), credentials
            )
        except Exception as e:
            # 搜索结果不因总结失败而丢弃
            logger.warning("search.summarize_failed", extra={"extra": {"error": str(e)}})
            return SearchAnswer(content=f"Here's what I found:\n\n{context}", citations=citations)
        return SearchAnswer(content=result.content, citations=citations)
