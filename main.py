"""
Order support assistant entry point.

Serves the chat API over HTTP or runs the console demo for development.

Usage:
    HTTP server:  python main.py serve
    Console mode: python main.py console [--offline] [--scenario tasks]
"""

import logging
import sys

from order_support.config import settings

logger = logging.getLogger(__name__)


def _run_server() -> None:
    """Start the FastAPI app under uvicorn (requires OPENAI_API_KEY)."""
    import uvicorn

    from order_support.api.server import create_app

    app = create_app()
    logger.info("Server running at http://%s:%d", settings.server.host, settings.server.port)
    uvicorn.run(app, host=settings.server.host, port=settings.server.port, log_config=None)


def _run_console_mode(argv: list[str]) -> None:
    """Start the console demo."""
    from console_demo import main as console_main

    console_main(argv)


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode(sys.argv[2:])
    else:
        _run_server()
