"""对外 API：请求入口服务与 HTTP 应用。"""
