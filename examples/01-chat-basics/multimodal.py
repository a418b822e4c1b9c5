"""Multimodal Input Example.

Vision-capable models accept user messages made of several content parts.
Qwen-VL models served by DashScope also accept video URLs.

Features demonstrated:
- Text plus image URL in one user message
- Local images sent as base64 data URLs
- Video input for Qwen-VL
"""

import sys
from pathlib import Path

from llm_recipes import Message, OpenAIProvider, get_logger, setup_logging
from llm_recipes.providers import image_part, image_part_from_file, video_part

setup_logging()
logger = get_logger(__name__)

SAMPLE_IMAGE_URL = "https://dashscope.oss-cn-beijing.aliyuncs.com/images/dog_and_girl.jpeg"
SAMPLE_VIDEO_URL = "https://help-static-aliyun-doc.aliyuncs.com/file-manage-files/zh-CN/20241115/cqqkru/1.mp4"


def vision_provider() -> OpenAIProvider:
    """Client for Qwen's vision model."""
    provider = OpenAIProvider(endpoint="qwen")
    provider.default_model = provider.preset.vision_model or provider.default_model
    return provider


def describe_image_url(provider: OpenAIProvider, url: str = SAMPLE_IMAGE_URL) -> str:
    """Describe an image fetched by the endpoint from a URL."""
    message = Message.user_parts("What is in this picture? Answer in two sentences.", image_part(url))
    response = provider.complete([message], max_tokens=300)
    logger.info("image_described", source="url")
    return response.content or ""


def describe_local_image(provider: OpenAIProvider, path: Path) -> str:
    """Describe a local image sent inline as base64."""
    message = Message.user_parts("Describe this image briefly.", image_part_from_file(path, detail="low"))
    response = provider.complete([message], max_tokens=300)
    logger.info("image_described", source="file", path=str(path))
    return response.content or ""


def describe_video(provider: OpenAIProvider, url: str = SAMPLE_VIDEO_URL) -> str:
    """Summarize a short video clip."""
    message = Message.user_parts("What happens in this video?", video_part(url))
    response = provider.complete([message], max_tokens=300)
    logger.info("video_described")
    return response.content or ""


def main() -> None:
    """Run the multimodal examples."""
    print("=" * 60)
    print("Multimodal Input Example")
    print("=" * 60)

    provider = vision_provider()

    print("\n--- Image URL ---")
    print(describe_image_url(provider))

    if len(sys.argv) > 1:
        print("\n--- Local Image ---")
        print(describe_local_image(provider, Path(sys.argv[1])))

    print("\n--- Video ---")
    print(describe_video(provider))


if __name__ == "__main__":
    main()
