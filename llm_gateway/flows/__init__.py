"""编排流程：多 Provider 顺序回退与搜索增强回答。"""

from llm_gateway.flows.fallback import FallbackOrchestrator
from llm_gateway.flows.search import SearchPipeline

__all__ = ["FallbackOrchestrator", "SearchPipeline"]
