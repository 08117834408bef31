"""配置管理模块。

支持从环境变量、.env 以及 config.yaml 加载配置，优先级从高到低：
构造参数 > 环境变量 > .env > config.yaml > secrets 目录。

各 Provider 的密钥都是可选的：缺失只意味着该 Provider 不参与候选，
并不是错误。调用方在请求里携带的密钥优先于这里的进程级配置。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("GATEWAY_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """网关配置（使用 Pydantic）。"""

    # ---- Provider 密钥 ----
    groq_api_key: Optional[str] = Field(default=None, description="Groq API 密钥")
    hf_api_key: Optional[str] = Field(default=None, description="HuggingFace API 密钥")
    openrouter_api_key: Optional[str] = Field(default=None, description="OpenRouter API 密钥")
    search_api_key: Optional[str] = Field(default=None, description="Serper 搜索 API 密钥")

    # ---- Provider 地址 ----
    groq_base_url: str = Field(default="https://api.groq.com/openai/v1")
    hf_base_url: str = Field(default="https://router.huggingface.co/v1")
    openrouter_base_url: str = Field(default="https://openrouter.ai/api/v1")
    search_url: str = Field(default="https://google.serper.dev/search")

    # OpenRouter 要求的来源标识头
    app_url: str = Field(
        default="https://genz-ai.vercel.app",
        validation_alias=AliasChoices("app_url", "APP_URL", "NEXT_PUBLIC_APP_URL"),
    )
    app_title: str = Field(default="GenZ AI")

    default_model: str = Field(
        default="g:llama-3.3-70b-versatile",
        description="请求未指定 model 时使用的模型选择串",
    )
    daily_request_limit: int = Field(
        default=70,
        ge=0,
        description="单个客户端每日请求上限，0 表示不限制",
    )

    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000, ge=1, le=65535)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("groq_api_key", "hf_api_key", "openrouter_api_key", "search_api_key")
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        if v and len(v) < 10:
            raise ValueError("API key seems too short")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = Settings()
