"""Tests for configuration module."""

import os
from unittest.mock import patch

import pytest

from llm_recipes.core.config import DEMO_API_KEY, Settings, get_settings


class TestSettings:
    """Tests for Settings class."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

            assert settings.default_endpoint == "deepseek"
            assert settings.default_model is None
            assert settings.default_temperature == 0.7
            assert settings.log_level == "INFO"
            assert settings.max_retries == 3
            assert settings.chat_memory_key_prefix == "langchain4j:chat-memory:"
            assert settings.memory_max_messages == 20
            assert settings.stream_max_workers == 32

    def test_env_override(self) -> None:
        """Test environment variable overrides."""
        env = {
            "LLM_RECIPES_DEFAULT_ENDPOINT": "qwen",
            "LLM_RECIPES_LOG_LEVEL": "DEBUG",
            "LLM_RECIPES_MAX_RETRIES": "5",
            "LLM_RECIPES_REDIS_URL": "redis://cache:6380/2",
            "LLM_RECIPES_STREAM_MAX_WORKERS": "64",
        }

        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

            assert settings.default_endpoint == "qwen"
            assert settings.log_level == "DEBUG"
            assert settings.max_retries == 5
            assert settings.redis_url == "redis://cache:6380/2"
            assert settings.stream_max_workers == 64

    def test_api_keys_from_env(self) -> None:
        """Test unprefixed API key loading from environment."""
        env = {
            "OPENAI_API_KEY": "sk-test-key",
            "DEEPSEEK_API_KEY": "sk-deepseek",
            "QWEN_API_KEY": "sk-qwen",
        }

        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

            assert settings.openai_key == "sk-test-key"
            assert settings.deepseek_key == "sk-deepseek"
            assert settings.qwen_key == "sk-qwen"

    def test_api_key_for(self) -> None:
        """Test key resolution per endpoint."""
        with patch.dict(os.environ, {"DEEPSEEK_API_KEY": "sk-deepseek"}, clear=True):
            settings = Settings(_env_file=None)

            assert settings.api_key_for("deepseek") == "sk-deepseek"
            assert settings.api_key_for("openai") is None
            assert settings.api_key_for("demo") == DEMO_API_KEY
            assert settings.api_key_for("unknown") is None

    def test_temperature_validation(self) -> None:
        """Test temperature bounds validation."""
        env = {"LLM_RECIPES_DEFAULT_TEMPERATURE": "1.5"}
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)
            assert settings.default_temperature == 1.5

        env = {"LLM_RECIPES_DEFAULT_TEMPERATURE": "3.0"}
        with patch.dict(os.environ, env, clear=True):
            with pytest.raises(Exception):  # Pydantic ValidationError
                Settings(_env_file=None)

    def test_unknown_endpoint_rejected(self) -> None:
        """Test that only known endpoint presets are accepted."""
        with patch.dict(os.environ, {"LLM_RECIPES_DEFAULT_ENDPOINT": "mistral"}, clear=True):
            with pytest.raises(Exception):
                Settings(_env_file=None)


class TestGetSettings:
    """Tests for get_settings function."""

    def test_returns_settings_instance(self) -> None:
        """Test that get_settings returns a Settings instance."""
        settings = get_settings()
        assert isinstance(settings, Settings)

    def test_caching(self) -> None:
        """Test that settings are cached."""
        settings1 = get_settings()
        settings2 = get_settings()

        assert settings1 is settings2
