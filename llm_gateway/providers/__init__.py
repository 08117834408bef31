"""Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 维护 Provider 静态配置与默认回退顺序 (registry)。
- 解析模型选择串 (resolver)。
- 提供各厂商的具体实现 (groq_client、huggingface_client、openrouter_client、serper_client)。

LLM_CLIENTS 是按 ProviderKind 索引的查找表，上层据此分发，不写条件分支。
"""

from typing import Dict, Mapping, Type

from llm_gateway.config.settings import settings
from llm_gateway.domain.models import ProviderKind
from llm_gateway.providers.base import ProviderClient, SearchClient
from llm_gateway.providers.groq_client import GroqClient
from llm_gateway.providers.huggingface_client import HuggingFaceClient
from llm_gateway.providers.openrouter_client import OpenRouterClient
from llm_gateway.providers.serper_client import SerperClient


LLM_CLIENTS: Mapping[ProviderKind, Type[ProviderClient]] = {
    ProviderKind.GROQ: GroqClient,
    ProviderKind.HUGGINGFACE: HuggingFaceClient,
    ProviderKind.OPENROUTER: OpenRouterClient,
}


def create_provider(kind: ProviderKind, cfg=None) -> ProviderClient:
    """根据 ProviderKind 创建 LLM Provider 实例。"""

    try:
        client_cls = LLM_CLIENTS[kind]
    except KeyError:
        raise KeyError(f"Not an LLM provider: {kind!r}") from None
    return client_cls(cfg or settings)


def create_llm_clients(cfg=None) -> Dict[ProviderKind, ProviderClient]:
    return {kind: create_provider(kind, cfg) for kind in LLM_CLIENTS}


def create_search_client(cfg=None) -> SearchClient:
    return SerperClient(cfg or settings)


__all__ = [
    "LLM_CLIENTS",
    "ProviderClient",
    "SearchClient",
    "create_llm_clients",
    "create_provider",
    "create_search_client",
]
