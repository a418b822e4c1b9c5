"""Configuration management using Pydantic settings.

This module provides a centralized configuration system that:
- Loads settings from environment variables and .env files
- Resolves API keys for the OpenAI-compatible endpoints the recipes target
- Holds chat-memory, embedding and streaming defaults
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

EndpointName = Literal["openai", "deepseek", "qwen", "demo"]

DEMO_API_KEY = "demo"


class Settings(BaseSettings):  # type: ignore[misc]
    """Application settings loaded from environment variables.

    Prefix: LLM_RECIPES_ (e.g., LLM_RECIPES_LOG_LEVEL=DEBUG).
    Provider API keys are read without the prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="LLM_RECIPES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API keys (unprefixed so existing shell exports work)
    openai_api_key: SecretStr | None = Field(default=None, alias="OPENAI_API_KEY")
    deepseek_api_key: SecretStr | None = Field(default=None, alias="DEEPSEEK_API_KEY")
    qwen_api_key: SecretStr | None = Field(default=None, alias="QWEN_API_KEY")

    # Chat model defaults
    default_endpoint: EndpointName = "deepseek"
    default_model: str | None = None
    default_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    default_max_tokens: int = Field(default=4096, ge=1, le=128000)
    request_timeout: float = Field(default=60.0, gt=0)

    # Embeddings
    embedding_endpoint: EndpointName = "qwen"
    embedding_model: str = "text-embedding-v2"

    # Retry settings
    max_retries: int = Field(default=3, ge=0, le=10)
    retry_min_wait: float = Field(default=1.0, ge=0.1)
    retry_max_wait: float = Field(default=60.0, ge=1.0)

    # Logging settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "console"

    # Chat memory
    redis_url: str = "redis://localhost:6379/0"
    redis_max_connections: int = Field(default=20, ge=1)
    chat_memory_key_prefix: str = "langchain4j:chat-memory:"
    memory_max_messages: int = Field(default=20, ge=1)
    memory_max_tokens: int = Field(default=1000, ge=1)
    token_count_model: str = "gpt-3.5-turbo"

    # Streaming server
    sse_timeout_seconds: float = Field(default=60.0, gt=0)
    # A stalled stream holds its worker until the next chunk or request_timeout
    stream_max_workers: int = Field(default=32, ge=1)

    @property
    def openai_key(self) -> str | None:
        """Get OpenAI API key as string."""
        return self.openai_api_key.get_secret_value() if self.openai_api_key else None

    @property
    def deepseek_key(self) -> str | None:
        """Get DeepSeek API key as string."""
        return self.deepseek_api_key.get_secret_value() if self.deepseek_api_key else None

    @property
    def qwen_key(self) -> str | None:
        """Get Qwen (DashScope) API key as string."""
        return self.qwen_api_key.get_secret_value() if self.qwen_api_key else None

    def api_key_for(self, endpoint: str) -> str | None:
        """Resolve the API key for a named endpoint.

        Args:
            endpoint: Endpoint preset name ("openai", "deepseek", "qwen", "demo").

        Returns:
            The key, or None when it is not configured.
        """
        if endpoint == "demo":
            return DEMO_API_KEY
        return {
            "openai": self.openai_key,
            "deepseek": self.deepseek_key,
            "qwen": self.qwen_key,
        }.get(endpoint)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: The application settings singleton.
    """
    return Settings()
