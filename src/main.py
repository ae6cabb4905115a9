"""Entry point for running the server: `dots-server` (or `python -m src.main`)."""

import logging

import uvicorn

from src.api.app import create_app
from src.core.config import Settings
from src.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """Start the dots-and-boxes server with settings taken from the environment."""
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_format)
    app = create_app(settings)
    logger.info("Starting server on %s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
