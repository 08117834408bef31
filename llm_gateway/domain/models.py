"""统一的对话与结果数据模型。

本模块定义了网关内部在不同 Provider 之间共享的标准数据结构：

- ChatMessage: 一条对话消息（system/user/assistant）。
- ProviderKind: 封闭的 Provider 变体集合。
- Credentials: 调用方密钥与进程级配置的合并视图。
- ProviderResult / SearchAnswer / ChatReply: 各层的成功返回值。

所有 Provider 适配器都只依赖这些模型，并负责在各自的 API JSON
和这些模型之间做转换。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Literal, Mapping, Optional


# 消息角色（与 OpenAI 兼容接口的 role 字段一致）
Role = Literal["system", "user", "assistant"]


class ProviderKind(str, Enum):
    """网关可以访问的后端。前三个是 LLM，最后一个是搜索。"""

    GROQ = "groq"
    HUGGINGFACE = "huggingface"
    OPENROUTER = "openrouter"
    SEARCH = "search"


@dataclass
class ChatMessage:
    """一条对话消息。消息列表的顺序即时间顺序，跨 Provider 必须保持。"""

    role: Role
    content: str

    def to_payload(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class ModelSelection:
    """模型选择串解析结果，例如 "hf:Qwen/Qwen2.5-72B-Instruct"。"""

    provider: ProviderKind
    model_id: str


@dataclass
class Citation:
    """搜索增强回答附带的引用，顺序与搜索引擎排名一致。"""

    title: str
    url: str
    snippet: str

    def to_dict(self) -> Dict[str, str]:
        return {"title": self.title, "url": self.url, "snippet": self.snippet}


@dataclass
class ProviderResult:
    """一次 LLM 调用（直接或经过回退）的成功结果。"""

    content: str
    provider: str
    was_fallback: bool = False


@dataclass
class SearchAnswer:
    """搜索流程的结果；citations 为空表示没有可展示的来源。"""

    content: str
    citations: List[Citation] = field(default_factory=list)


@dataclass
class ChatReply:
    """入口层返回给 HTTP 层的结果。

    - citations 只在搜索模式下出现。
    - provider / fallback 只在 LLM 模式下出现。
    """

    content: str
    citations: Optional[List[Citation]] = None
    provider: Optional[str] = None
    fallback: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"content": self.content}
        if self.citations is not None:
            data["citations"] = [c.to_dict() for c in self.citations]
        if self.provider is not None:
            data["provider"] = self.provider
        if self.fallback is not None:
            data["fallback"] = self.fallback
        return data


# 进程级配置里各 Provider 对应的字段名
_SETTINGS_KEY_FIELDS: Dict[ProviderKind, str] = {
    ProviderKind.GROQ: "groq_api_key",
    ProviderKind.HUGGINGFACE: "hf_api_key",
    ProviderKind.OPENROUTER: "openrouter_api_key",
    ProviderKind.SEARCH: "search_api_key",
}


@dataclass
class Credentials:
    """密钥解析：调用方传入的非空密钥优先，其次是进程级配置。

    两者都没有时 resolve 返回 None，该 Provider 被排除在候选之外。
    """

    supplied: Mapping[str, Optional[str]] = field(default_factory=dict)
    settings: Any = None

    def resolve(self, provider: ProviderKind) -> Optional[str]:
        own = self.supplied.get(provider.value)
        if own:
            return own
        if self.settings is None:
            return None
        return getattr(self.settings, _SETTINGS_KEY_FIELDS[provider], None) or None

    def has(self, provider: ProviderKind) -> bool:
        return self.resolve(provider) is not None
