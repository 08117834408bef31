"""python -m llm_gateway：用 uvicorn 启动 HTTP 服务。"""

import uvicorn

from llm_gateway.config.settings import settings


def main() -> None:
    uvicorn.run(
        "llm_gateway.api.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    main()
