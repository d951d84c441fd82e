"""Entry point for the HTTP service."""

import asyncio
import contextlib
import sys

import structlog
import uvicorn

from search_sync.app import create_app
from search_sync.config import Settings
from search_sync.logging import configure_logging

logger = structlog.get_logger()


async def serve(settings: Settings) -> None:
    """Run uvicorn until it receives SIGTERM or SIGINT.

    Args:
        settings: Server configuration.
    """
    app = create_app(settings)
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level="warning",
        access_log=False,
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Entry point for python -m search_sync."""
    settings = Settings()
    configure_logging(debug=settings.debug)

    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(serve(settings))

    sys.exit(0)


if __name__ == "__main__":
    main()
