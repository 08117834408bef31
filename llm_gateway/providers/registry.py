"""Provider 与模型配置。

本模块集中维护每个后端的静态参数（端点、生成参数、超时），以及
回退编排使用的默认候选顺序。

回退顺序是一个显式的配置值：FallbackOrchestrator 通过构造参数接收它，
测试可以替换成别的顺序或别的 Provider。
"""

from dataclasses import dataclass
from typing import Mapping, Tuple

from llm_gateway.domain.models import ProviderKind


@dataclass(frozen=True)
class ProviderConfig:
    """某个 Provider 的整体配置。"""

    name: str
    label: str
    base_url: str
    default_model: str
    max_tokens: int
    temperature: float
    timeout: float


@dataclass(frozen=True)
class FallbackCandidate:
    """回退链中的一个候选：使用哪个 Provider、哪个模型。"""

    provider: ProviderKind
    model_id: str


GROQ_CONFIG = ProviderConfig(
    name="groq",
    label="Groq",
    base_url="https://api.groq.com/openai/v1",
    default_model="llama-3.3-70b-versatile",
    max_tokens=4096,
    temperature=0.7,
    timeout=30.0,
)

# HuggingFace 路由冷启动较慢，超时放宽到 60 秒
HUGGINGFACE_CONFIG = ProviderConfig(
    name="huggingface",
    label="HuggingFace",
    base_url="https://router.huggingface.co/v1",
    default_model="Qwen/Qwen2.5-72B-Instruct",
    max_tokens=2048,
    temperature=0.7,
    timeout=60.0,
)

OPENROUTER_CONFIG = ProviderConfig(
    name="openrouter",
    label="OpenRouter",
    base_url="https://openrouter.ai/api/v1",
    default_model="google/gemma-2-27b-it",
    max_tokens=4096,
    temperature=0.7,
    timeout=30.0,
)

SEARCH_URL = "https://google.serper.dev/search"
SEARCH_TIMEOUT = 15.0
SEARCH_RESULT_COUNT = 5


PROVIDER_REGISTRY: Mapping[ProviderKind, ProviderConfig] = {
    ProviderKind.GROQ: GROQ_CONFIG,
    ProviderKind.HUGGINGFACE: HUGGINGFACE_CONFIG,
    ProviderKind.OPENROUTER: OPENROUTER_CONFIG,
}

# 顺序即延迟/质量偏好，不随机、不按请求变化
DEFAULT_FALLBACK_ORDER: Tuple[FallbackCandidate, ...] = tuple(
    FallbackCandidate(provider=kind, model_id=cfg.default_model)
    for kind, cfg in PROVIDER_REGISTRY.items()
)

