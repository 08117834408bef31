"""模型选择串解析。

选择串形如 "<前缀>:<模型 ID>"，前缀决定 Provider：

    g:   -> groq
    hf:  -> huggingface
    or:  -> openrouter
    web: -> search

没有匹配前缀时回落到 groq，并把整个输入当作模型 ID。这是有意保留的
默认行为，不是错误。
"""

from typing import Tuple

from llm_gateway.domain.models import ModelSelection, ProviderKind


MODEL_PREFIXES: Tuple[Tuple[str, ProviderKind], ...] = (
    ("g:", ProviderKind.GROQ),
    ("hf:", ProviderKind.HUGGINGFACE),
    ("or:", ProviderKind.OPENROUTER),
    ("web:", ProviderKind.SEARCH),
)


def resolve(model_selector: str) -> ModelSelection:
    for prefix, provider in MODEL_PREFIXES:
        if model_selector.startswith(prefix):
            return ModelSelection(provider=provider, model_id=model_selector[len(prefix):])
    return ModelSelection(provider=ProviderKind.GROQ, model_id=model_selector)
