import json
import logging
from pathlib import Path
from datetime import datetime, timezone
from typing import Any, Optional
from llm_gateway.config.settings import settings


REDACT_LIMIT = 64


def _redact(value: Any) -> Any:
    """截断所有字符串（含嵌套在 list/tuple/dict 里的），其他类型原样保留。"""

    if isinstance(value, str):
        return value[:REDACT_LIMIT]
    if isinstance(value, dict):
        return {k: _redact(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_redact(v) for v in value]
    return value


class JsonFormatter(logging.Formatter):
    """每条日志输出一个 JSON 对象；extra={"extra": {...}} 中的字段并入顶层。

    redact 为 None 时按 settings.log_redact_content 决定是否脱敏，
    脱敏同时作用于 msg 与 extra 中的字符串（上游响应体、错误信息等）。
    """

    def __init__(self, redact: Optional[bool] = None):
        super().__init__()
        self._redact = redact

    def format(self, record: logging.LogRecord) -> str:
        redact = settings.log_redact_content if self._redact is None else self._redact
        msg = record.getMessage()
        if redact:
            msg = _redact(msg or "")
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "msg": msg,
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(_redact(extra) if redact else extra)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logger() -> logging.Logger:
    logger = logging.getLogger("llm_gateway")
    logger.setLevel(logging.INFO)
    if logger.handlers:
        return logger
    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    fh = logging.FileHandler(log_dir / "gateway.log", encoding="utf-8")
    fh.setLevel(logging.INFO)
    fh.setFormatter(JsonFormatter())
    logger.addHandler(fh)
    return logger


logger = setup_logger()
