"""BEd results scraper - main entry point."""

import asyncio

from .config.logger import configure_logging, logger
from .config.settings import load_app_config
from .mcp_server.server import create_server
from .runtime import build_services


def run():
    """Entry point for the ``bed-results-server`` script."""
    settings = load_app_config()
    configure_logging(settings.log_level)

    services = build_services(settings)
    server = create_server(services)

    logger.info("server_starting", portal_url=settings.portal_url, max_workers=settings.max_workers)
    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("server_interrupted")
    finally:
        asyncio.run(services.shutdown())
        logger.info("server_stopped")


if __name__ == "__main__":
    run()
