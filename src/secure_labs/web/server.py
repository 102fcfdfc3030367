import asyncio
import logging

import uvicorn

from secure_labs.settings import load_settings
from secure_labs.types import LabName
from secure_labs.web.app import create_app
from secure_labs.web.config import LabConfig
from secure_labs.web.dependencies import create_dependencies

logger = logging.getLogger(__name__)


def build_server(config: LabConfig) -> uvicorn.Server:
    """Build the uvicorn server for one lab. No ``Server`` header is sent."""
    app = create_app(create_dependencies(config))
    return uvicorn.Server(
        uvicorn.Config(app, host=config.host, port=config.port, log_level="info", server_header=False)
    )


async def run_lab(config: LabConfig):
    # uvicorn installs its own SIGINT/SIGTERM handlers and drains requests before exiting
    server = build_server(config)
    try:
        await server.serve()
    finally:
        logger.info(f"{config.lab.value} lab on http://{config.host}:{config.port} stopped")


def start_lab(config: LabConfig):
    """Start a lab and block until it exits."""
    try:
        asyncio.run(run_lab(config))
    except KeyboardInterrupt:
        logger.info("Lab stopped by user")


def main():
    """Entry point for ``python -m secure_labs.web``."""
    start_lab(LabConfig.from_settings(load_settings(), LabName.CANONICALIZATION))
