"""LLM Gateway 顶层包。

该包提供一个多 Provider 聊天网关的核心实现，
包括配置加载、领域模型、Provider 适配、顺序回退编排、
搜索增强回答以及对外的 HTTP 入口。
"""

__version__ = "0.1.0"
