"""Provider 抽象接口。

上层（回退编排、搜索流程、入口）不直接依赖具体厂商的 HTTP 细节，而是依赖此协议：

- 每个 LLM 厂商实现一个 ProviderClient（如 GroqClient）。
- 负责：将消息列表转成一次 HTTP 请求，并把响应 JSON 解析为纯文本。
- 失败时抛出带分类标签的 BusinessError 子类；适配器内部不做重试。
"""

from typing import List, Optional, Protocol, Sequence

from llm_gateway.domain.models import ChatMessage, Citation


class ProviderClient(Protocol):
    """LLM Provider 客户端协议。

    实现者需要提供：
    - name: Provider 名称，用于日志与回退错误汇总。
    - call(messages, model_id, api_key): 执行一次非流式调用，返回回答文本。
    """

    name: str

    async def call(
        self,
        messages: Sequence[ChatMessage],
        model_id: str,
        api_key: Optional[str] = None,
    ) -> str:
        ...


class SearchClient(Protocol):
    """搜索后端协议，返回按排名排序的结果。"""

    name: str

    async def search(self, query: str, api_key: str) -> List[Citation]:
        ...
