"""Streaming Chat Server Example.

Serves the streaming chat application with uvicorn.

Try it:
    curl -N "http://localhost:8080/api/chat/stream?message=Tell%20me%20a%20joke"
    curl -N "http://localhost:8080/api/cancellable/chat/stream?message=Tell%20me%20a%20long%20story&requestId=r1"
    curl -X POST "http://localhost:8080/api/cancellable/chat/cancel?requestId=r1"

WebSocket clients connect to ws://localhost:8080/ws/chat and send plain
text frames.
"""

import os

import uvicorn

from llm_recipes import get_logger, get_settings, setup_logging
from llm_recipes.server import create_app

setup_logging()
logger = get_logger(__name__)


def main() -> None:
    """Start the server."""
    settings = get_settings()
    port = int(os.getenv("PORT", "8080"))
    app = create_app()

    logger.info("server_starting", port=port, endpoint=settings.default_endpoint)
    uvicorn.run(app, host="0.0.0.0", port=port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
