"""领域层模型与异常。

包含：
- models: ChatMessage / Citation / ProviderResult 等统一数据结构。
- exceptions: 按错误类别打标签的业务异常。
"""
