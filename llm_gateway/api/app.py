"""HTTP 应用（FastAPI）。

路由：
- POST /api/chat    聊天入口，成功 200，请求不合法 400，当日额度用完 429，其余 500。
- GET  /api/health  服务状态及各 Provider 是否配置了进程级密钥。
- GET  /api/usage   调用方当日已用/剩余请求数。

客户端身份优先取 X-Client-Id 头，其次是代理转发的 IP，最后是直连 IP。
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from llm_gateway.api.errors import error_payload
from llm_gateway.api.service import ChatService
from llm_gateway.api.usage import DailyUsageCounter
from llm_gateway.config.settings import settings
from llm_gateway.domain.exceptions import DailyLimitError
from llm_gateway.domain.models import Credentials, ProviderKind
from llm_gateway.infrastructure.logging.logger import logger


def client_identity(request: Request) -> str:
    client_id = request.headers.get("X-Client-Id")
    if client_id:
        return client_id.strip()
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


def create_app(
    service: Optional[ChatService] = None,
    usage: Optional[DailyUsageCounter] = None,
    cfg=None,
) -> FastAPI:
    cfg = cfg or settings
    app = FastAPI(title="LLM Gateway")
    app.state.service = service or ChatService(cfg)
    app.state.usage = usage or DailyUsageCounter(cfg.daily_request_limit)

    @app.post("/api/chat")
    async def chat(request: Request) -> JSONResponse:
        client_id = client_identity(request)
        counter: DailyUsageCounter = app.state.usage
        try:
            counter.reserve(client_id)
        except DailyLimitError as e:
            logger.warning("chat.daily_limit", extra={"extra": {"client": client_id}})
            status, body = error_payload(e)
            return JSONResponse(body, status_code=status)

        status = 500
        try:
            try:
                payload = await request.json()
            except ValueError:
                # 非法 JSON 交给入口校验，按 INVALID_REQUEST 返回
                payload = None
            status, body = await app.state.service.respond(payload)
        finally:
            # 只有成功的回答才占用当日名额
            if status != 200:
                counter.release(client_id)
        return JSONResponse(body, status_code=status)

    @app.get("/api/health")
    async def health() -> dict:
        credentials = Credentials(settings=cfg)
        return {
            "status": "ok",
            "providers": {kind.value: credentials.has(kind) for kind in ProviderKind},
        }

    @app.get("/api/usage")
    async def usage_snapshot(request: Request) -> dict:
        return app.state.usage.snapshot(client_identity(request))

    return app
