"""Entry point for python -m bff_api."""

import sys

import uvicorn
from loguru import logger

from .app import create_app
from .config import load_settings
from .exceptions import ConfigurationError
from .log import configure_logging


def main() -> None:
    """Run the BFF server until interrupted."""
    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error("{error}", error=str(e))
        sys.exit(1)

    configure_logging(settings)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=settings.shutdown_grace_seconds,
    )


if __name__ == "__main__":
    main()
