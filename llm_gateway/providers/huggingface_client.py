"""HuggingFace Router Provider 适配器（次 LLM 后端）。

与其他后端的差异：
- 超时 60 秒、max_tokens 2048（见 registry）。
- 503 表示模型正在冷启动，抛出 ModelLoadingError。
"""

import httpx

from llm_gateway.domain.exceptions import ModelLoadingError
from llm_gateway.infrastructure.logging.logger import logger
from llm_gateway.providers.chat_completions import ChatCompletionsClient
from llm_gateway.providers.registry import HUGGINGFACE_CONFIG


class HuggingFaceClient(ChatCompletionsClient):
    name = "huggingface"
    config = HUGGINGFACE_CONFIG
    base_url_setting = "hf_base_url"
    unauthorized_statuses = (401, 403)

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.status_code == 503:
            logger.warning("provider.call.failed", extra={"extra": {"provider": self.name, "status": 503}})
            raise ModelLoadingError(message="Model is loading, please retry", provider=self.name)
        super()._raise_for_status(resp)
