"""异常到用户可读信息与 HTTP 状态码的映射。

这是唯一把异常转换成对外响应的地方。具体是哪个 Provider 出的错不影响
展示给用户的文本；上游的堆栈、响应体都不会出现在响应里。
"""

from typing import Any, Dict, Tuple

from llm_gateway.domain.exceptions import BusinessError, ErrorKind, classify


USER_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.RATE_LIMIT: "Taking a quick breather! Please try again in a moment.",
    ErrorKind.API_KEY_MISSING: (
        "Service temporarily unavailable. Please try again or add your own API key in Settings."
    ),
    ErrorKind.API_ERROR: "Something went wrong. Please try again in a moment.",
    ErrorKind.NETWORK_ERROR: "Connection issue. Please check your internet and try again.",
    ErrorKind.INVALID_REQUEST: "Something went wrong with your request. Please try again.",
    ErrorKind.TIMEOUT: "Request took too long. Please try with a shorter message.",
    ErrorKind.ALL_FAILED: (
        "All services are busy. Please try again later or add your own API key in Settings."
    ),
    ErrorKind.DAILY_LIMIT: "You've reached your daily request limit. Try again tomorrow!",
    ErrorKind.UNKNOWN: "Something went wrong. Please try again.",
}

# 适配器级别的分类折叠到对外分类
_PUBLIC_KIND: Dict[ErrorKind, ErrorKind] = {
    ErrorKind.NO_KEY: ErrorKind.API_KEY_MISSING,
    ErrorKind.UNAUTHORIZED: ErrorKind.API_KEY_MISSING,
    ErrorKind.MODEL_LOADING: ErrorKind.API_ERROR,
}


def public_kind(exc: BaseException) -> ErrorKind:
    kind = classify(exc)
    return _PUBLIC_KIND.get(kind, kind)


def http_status_for(exc: BaseException) -> int:
    """状态码取自异常本身（BusinessError.http_status），非业务异常为 500。"""

    if isinstance(exc, BusinessError):
        return exc.http_status
    return 500


def error_payload(exc: BaseException) -> Tuple[int, Dict[str, Any]]:
    """返回 (HTTP 状态码, {"error": 用户文本, "code": 分类})。"""

    kind = public_kind(exc)
    return http_status_for(exc), {"error": USER_MESSAGES[kind], "code": kind.value}
