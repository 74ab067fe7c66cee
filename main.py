"""
Scheduling service entry point.

Serves the scheduling and payment API, or prints the current availability
to the console for a quick calendar connectivity check.

Usage:
    API server:   python main.py serve
    Slot listing: python main.py slots
"""

import asyncio
import logging
import sys

from healthassist.config import AppConfig, load_config
from healthassist.container import build_container

logger = logging.getLogger(__name__)


def _run_server(config: AppConfig) -> None:
    """Start the HTTP API under uvicorn."""
    import uvicorn

    from healthassist.api import create_app

    app = create_app(build_container(config))
    logger.info("Starting %s on %s:%d", config.app_name, config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


def _print_slots(config: AppConfig) -> None:
    """Query the calendar once and print what a client would be offered."""
    container = build_container(config)
    result = asyncio.run(container.scheduling.get_available_slots())
    print(f"{result.status.value}: {result.message}")
    for slot in result.slots:
        print(f"  {slot.day_of_week:<9} {slot.date}  {slot.display_time:>8}  ({slot.start})")


if __name__ == "__main__":
    settings = load_config()
    if len(sys.argv) > 1 and sys.argv[1] == "slots":
        _print_slots(settings)
    else:
        _run_server(settings)
