"""系统提示词加载工具。

按语言(locale) 从 prompts/<locale> 目录读取 system prompt 文本，
用于构造 ChatMessage(role="system")。
"""

from functools import lru_cache
from pathlib import Path


PROMPTS_DIR = Path(__file__).resolve().parent

CHAT_SYSTEM = "chat_system"
SEARCH_SUMMARY_SYSTEM = "search_summary_system"


@lru_cache(maxsize=None)
def load_system_prompt(name: str, locale: str = "en") -> str:
    """根据提示词名称和语言加载文本，例如 load_system_prompt("chat_system")。"""

    fname = PROMPTS_DIR / locale / f"{name}.md"
    return fname.read_text(encoding="utf-8").strip()
