"""多 Provider 顺序回退。

FallbackOrchestrator 按固定优先级依次尝试各 LLM Provider：

1. 候选顺序来自构造参数（默认 registry.DEFAULT_FALLBACK_ORDER）。
2. 只保留能解析出密钥的候选；一个都没有时直接抛 NoCredentialsError，不发任何请求。
3. 严格串行地逐个调用，第一个成功即返回，was_fallback = (序号 > 0)。
4. 单个候选失败只记录 (provider, 错误信息) 并继续，不在循环中途抛出。
5. 全部失败后抛 AllProvidersFailedError，携带每个候选的失败原因。

同一次编排内不会重试同一个候选；Provider 之间从不并发竞速。
"""

from typing import List, Mapping, Optional, Sequence, Tuple

from llm_gateway.domain.exceptions import AllProvidersFailedError, NoCredentialsError
from llm_gateway.domain.models import ChatMessage, Credentials, ProviderKind, ProviderResult
from llm_gateway.infrastructure.logging.logger import logger
from llm_gateway.providers.base import ProviderClient
from llm_gateway.providers.registry import DEFAULT_FALLBACK_ORDER, FallbackCandidate


class FallbackOrchestrator:
    def __init__(
        self,
        clients: Mapping[ProviderKind, ProviderClient],
        order: Optional[Sequence[FallbackCandidate]] = None,
    ):
        self._clients = clients
        self._order = tuple(order if order is not None else DEFAULT_FALLBACK_ORDER)

    def available_candidates(
        self, credentials: Credentials
    ) -> List[Tuple[FallbackCandidate, str]]:
        """按顺序返回有密钥（且有客户端实现）的候选及其密钥。"""

        available = []
        for candidate in self._order:
            if candidate.provider not in self._clients:
                continue
            key = credentials.resolve(candidate.provider)
            if key:
                available.append((candidate, key))
        return available

    async def call_with_fallback(
        self, messages: Sequence[ChatMessage], credentials: Credentials
    ) -> ProviderResult:
        candidates = self.available_candidates(credentials)
        if not candidates:
            raise NoCredentialsError(message="No API keys available")

        errors: List[Tuple[str, str]] = []
        for index, (candidate, key) in enumerate(candidates):
            client = self._clients[candidate.provider]
            logger.info(
                "fallback.try",
                extra={"extra": {"provider": client.name, "model": candidate.model_id, "index": index}},
            )
            try:
                content = await client.call(messages, candidate.model_id, key)
            except Exception as e:
                logger.warning(
                    "fallback.failed",
                    extra={"extra": {"provider": client.name, "error": str(e)}},
                )
                errors.append((client.name, str(e) or type(e).__name__))
                continue
            return ProviderResult(content=content, provider=client.name, was_fallback=index > 0)

        logger.error("fallback.exhausted", extra={"extra": {"errors": errors}})
        raise AllProvidersFailedError(errors)
