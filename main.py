"""status-image daemon — entry point.

Runs a Telegram bot that answers /status_image with a card summarizing the
bot and the host it runs on.

Usage:
    python main.py configs/status_image.yaml
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal

from status_image.config import load_config
from status_image.logging_utils import configure_logging
from status_image.telegram_bot import TelegramHost

logger = logging.getLogger(__name__)


async def main() -> None:
    parser = argparse.ArgumentParser(description="Bot status card daemon")
    parser.add_argument(
        "config_file",
        help="Path to the YAML configuration file",
    )
    args = parser.parse_args()

    config = load_config(args.config_file)
    configure_logging(config.log_level)

    host = TelegramHost(config)

    # Signal handling for graceful shutdown
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("Shutdown signal received...")
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    logger.info("Starting status-image daemon...")
    await host.start()

    await stop_event.wait()

    logger.info("Shutting down...")
    await host.stop()
    logger.info("Daemon stopped.")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
