"""入站请求体结构。

对应 POST /api/chat 的 JSON：

    {"messages": [{"role": "user", "content": "hi"}],
     "model": "g:llama-3.3-70b-versatile",
     "apiKeys": {"groq": "...", "huggingface": "...", "openrouter": "...", "search": "..."}}
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class MessageIn(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: Literal["system", "user", "assistant"]
    content: str


class ApiKeys(BaseModel):
    """调用方自带的密钥，全部可选；空字符串视为未提供。"""

    model_config = ConfigDict(extra="ignore")

    groq: Optional[str] = None
    huggingface: Optional[str] = None
    openrouter: Optional[str] = None
    search: Optional[str] = None


class ChatRequestBody(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    messages: List[MessageIn] = Field(min_length=1)
    model: Optional[str] = None
    api_keys: Optional[ApiKeys] = Field(default=None, alias="apiKeys")

    def supplied_keys(self) -> Dict[str, Optional[str]]:
        if self.api_keys is None:
            return {}
        return self.api_keys.model_dump()
