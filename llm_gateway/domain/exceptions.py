"""统一业务异常模型。

所有跨模块抛出的业务级错误都继承自 BusinessError。每个子类在定义处
绑定一个 ErrorKind，适配器在检测到错误的位置（HTTP 状态码分支、超时、
网络异常）直接抛出对应子类；上层通过 classify() 读取这个标签，
而不是再去匹配错误信息里的字符串。
"""

from enum import Enum
from typing import List, Optional, Tuple


class ErrorKind(str, Enum):
    """固定的错误分类。"""

    NO_KEY = "NO_KEY"
    RATE_LIMIT = "RATE_LIMIT"
    UNAUTHORIZED = "UNAUTHORIZED"
    MODEL_LOADING = "MODEL_LOADING"
    API_ERROR = "API_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    INVALID_REQUEST = "INVALID_REQUEST"
    API_KEY_MISSING = "API_KEY_MISSING"
    ALL_FAILED = "ALL_FAILED"
    DAILY_LIMIT = "DAILY_LIMIT"
    UNKNOWN = "UNKNOWN"


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码，默认取子类的 kind。
        message: 错误信息（面向日志，不直接展示给最终用户）。
        http_status: 映射到 HTTP 时可用的状态码。
        extra: 其他补充字段（例如 provider、上游状态码等）。
    """

    kind: ErrorKind = ErrorKind.UNKNOWN
    default_http_status: int = 500

    def __init__(
        self,
        code: Optional[str] = None,
        message: str = "",
        http_status: Optional[int] = None,
        **extra,
    ):
        self.code = code or self.kind.value
        self.message = message
        self.http_status = http_status or self.default_http_status
        self.extra = extra
        super().__init__(f"{self.code}: {message}" if message else self.code)


class MissingKeyError(BusinessError):
    """单个 Provider 没有可用密钥。"""

    kind = ErrorKind.NO_KEY


class RateLimitError(BusinessError):
    """Provider 返回 429。"""

    kind = ErrorKind.RATE_LIMIT


class UnauthorizedError(BusinessError):
    """Provider 拒绝了密钥（401/403）。"""

    kind = ErrorKind.UNAUTHORIZED


class ModelLoadingError(BusinessError):
    """模型冷启动中（HuggingFace 返回 503）。"""

    kind = ErrorKind.MODEL_LOADING


class ApiError(BusinessError):
    """第三方 API 返回其他非 2xx，message 为原始响应体。"""

    kind = ErrorKind.API_ERROR


class NetworkError(BusinessError):
    """网络层错误，例如 DNS 失败、连接被拒绝。"""

    kind = ErrorKind.NETWORK_ERROR


class RequestTimeoutError(BusinessError):
    """单次调用超过了它的截止时间。"""

    kind = ErrorKind.TIMEOUT


class ValidationError(BusinessError):
    """入站请求格式不合法。"""

    kind = ErrorKind.INVALID_REQUEST
    default_http_status = 400


class NoCredentialsError(BusinessError):
    """没有任何一个 LLM Provider 拥有可用密钥。"""

    kind = ErrorKind.API_KEY_MISSING


class AllProvidersFailedError(BusinessError):
    """所有候选 Provider 都失败了。

    errors 按尝试顺序保存 (provider, 错误信息)。
    """

    kind = ErrorKind.ALL_FAILED

    def __init__(self, errors: List[Tuple[str, str]], **extra):
        self.errors = list(errors)
        detail = "; ".join(f"{name}: {msg}" for name, msg in self.errors)
        super().__init__(message=f"All providers failed ({detail})", **extra)


class SearchError(BusinessError):
    """搜索后端返回非 2xx。"""

    kind = ErrorKind.API_ERROR


class DailyLimitError(BusinessError):
    """客户端当天的请求次数已用完。"""

    kind = ErrorKind.DAILY_LIMIT
    default_http_status = 429


def classify(exc: BaseException) -> ErrorKind:
    """读取异常上的分类标签；非业务异常一律视为 UNKNOWN。"""

    if isinstance(exc, BusinessError):
        return exc.kind
    return ErrorKind.UNKNOWN
