"""Entry point for the API server."""

import contextlib
import sys

import structlog
import uvicorn

from media_api.app import create_app
from media_api.config import Settings
from media_api.logging import configure_logging

logger = structlog.get_logger()


def main() -> None:
    """Entry point for python -m media_api.

    Uvicorn installs its own SIGTERM/SIGINT handlers and drains open
    connections before the lifespan shutdown runs.
    """
    settings = Settings()
    configure_logging(debug=settings.debug)

    app = create_app(settings)
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level="warning",
        access_log=False,
    )

    with contextlib.suppress(KeyboardInterrupt):
        uvicorn.Server(config).run()

    logger.info("server_exited")
    sys.exit(0)


if __name__ == "__main__":
    main()
