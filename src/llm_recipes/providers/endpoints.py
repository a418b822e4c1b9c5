"""Named presets for the OpenAI-compatible endpoints used by the recipes."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Endpoint:
    """Connection defaults for one OpenAI-compatible endpoint."""

    name: str
    base_url: str | None
    default_model: str
    api_key_env: str
    vision_model: str | None = None
    embedding_model: str | None = None


ENDPOINTS: dict[str, Endpoint] = {
    "openai": Endpoint(
        name="openai",
        base_url=None,
        default_model="gpt-4o-mini",
        api_key_env="OPENAI_API_KEY",
        vision_model="gpt-4o-mini",
        embedding_model="text-embedding-3-small",
    ),
    "deepseek": Endpoint(
        name="deepseek",
        base_url="https://api.deepseek.com/v1",
        default_model="deepseek-chat",
        api_key_env="DEEPSEEK_API_KEY",
    ),
    "qwen": Endpoint(
        name="qwen",
        base_url="https://dashscope.aliyuncs.com/compatible-mode/v1",
        default_model="qwen-plus",
        api_key_env="QWEN_API_KEY",
        vision_model="qwen-vl-plus",
        embedding_model="text-embedding-v2",
    ),
    # Public demo proxy: fixed "demo" key, gpt-4o-mini only, low quota.
    "demo": Endpoint(
        name="demo",
        base_url="http://langchain4j.dev/demo/openai/v1",
        default_model="gpt-4o-mini",
        api_key_env="",
    ),
}


def get_endpoint(name: str) -> Endpoint:
    """Look up an endpoint preset by name.

    Raises:
        ValueError: If the name is not a known preset.
    """
    try:
        return ENDPOINTS[name]
    except KeyError:
        raise ValueError(f"Unknown endpoint: {name}. Available: {list(ENDPOINTS)}") from None
