"""请求入口服务。

ChatService.handle 负责一次聊天请求的完整流程：

1. 校验请求体（messages 必须是非空列表），不合法直接抛 ValidationError。
2. 解析模型选择串。搜索模式下把最后一条 user 消息交给 SearchPipeline。
3. 否则在对话前插入固定的 system 提示词，直接调用选中的 Provider。
4. 直接调用失败时，退回到完整的 FallbackOrchestrator（各后端使用默认模型）。

ChatService.respond 在 handle 外层做唯一一次异常兜底，转换成
(HTTP 状态码, 响应体)。
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError as SchemaError

from llm_gateway.api.errors import error_payload
from llm_gateway.api.schemas import ChatRequestBody
from llm_gateway.config.settings import settings
from llm_gateway.domain.exceptions import ValidationError
from llm_gateway.domain.models import (
    ChatMessage,
    ChatReply,
    Credentials,
    ModelSelection,
    ProviderKind,
    ProviderResult,
)
from llm_gateway.flows.fallback import FallbackOrchestrator
from llm_gateway.flows.search import SearchPipeline
from llm_gateway.infrastructure.logging.logger import logger
from llm_gateway.prompts import CHAT_SYSTEM, load_system_prompt
from llm_gateway.providers import create_llm_clients, create_search_client
from llm_gateway.providers.base import ProviderClient, SearchClient
from llm_gateway.providers.registry import FallbackCandidate
from llm_gateway.providers.resolver import resolve


def parse_request(payload: Any) -> ChatRequestBody:
    """把原始 JSON 转成 ChatRequestBody，失败统一抛 INVALID_REQUEST。"""

    try:
        return ChatRequestBody.model_validate(payload)
    except SchemaError as e:
        raise ValidationError(message=f"Invalid chat request: {e.error_count()} error(s)")


def last_user_message(messages: Sequence[ChatMessage]) -> str:
    for message in reversed(messages):
        if message.role == "user":
            return message.content
    return ""


class ChatService:
    def __init__(
        self,
        cfg=settings,
        clients: Optional[Mapping[ProviderKind, ProviderClient]] = None,
        search_client: Optional[SearchClient] = None,
        fallback_order: Optional[Sequence[FallbackCandidate]] = None,
    ):
        self._settings = cfg
        self._clients = clients if clients is not None else create_llm_clients(cfg)
        self._orchestrator = FallbackOrchestrator(self._clients, fallback_order)
        self._search = SearchPipeline(search_client or create_search_client(cfg), self._orchestrator)

    async def handle(self, payload: Any) -> ChatReply:
        req = parse_request(payload)
        messages = [ChatMessage(role=m.role, content=m.content) for m in req.messages]
        credentials = Credentials(supplied=req.supplied_keys(), settings=self._settings)
        selection = resolve(req.model or self._settings.default_model)

        if selection.provider is ProviderKind.SEARCH:
            answer = await self._search.run(last_user_message(messages), credentials)
            return ChatReply(content=answer.content, citations=answer.citations)

        conversation: List[ChatMessage] = [
            ChatMessage(role="system", content=load_system_prompt(CHAT_SYSTEM)),
            *messages,
        ]
        result = await self._complete(conversation, selection, credentials)
        return ChatReply(content=result.content, provider=result.provider, fallback=result.was_fallback)

    async def respond(self, payload: Any) -> Tuple[int, Dict[str, Any]]:
        try:
            reply = await self.handle(payload)
        except Exception as e:
            status, body = error_payload(e)
            logger.error(
                "chat.error",
                extra={"extra": {"code": body["code"], "status": status, "error": str(e)}},
            )
            return status, body
        return 200, reply.to_dict()

    async def _complete(
        self,
        conversation: Sequence[ChatMessage],
        selection: ModelSelection,
        credentials: Credentials,
    ) -> ProviderResult:
        """先直连选中的 Provider/模型，失败后走完整回退链。"""

        client = self._clients.get(selection.provider)
        if client is not None:
            try:
                content = await client.call(
                    conversation, selection.model_id, credentials.resolve(selection.provider)
                )
                return ProviderResult(content=content, provider=client.name, was_fallback=False)
            except Exception as e:
                logger.warning(
                    "chat.direct_failed",
                    extra={"extra": {"provider": client.name, "model": selection.model_id, "error": str(e)}},
                )
        return await self._orchestrator.call_with_fallback(conversation, credentials)
