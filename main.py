#!/usr/bin/env python3
"""
RoMod - Dashboard Backend Entry Point
=====================================

Starts the moderation API: case store, relay gateway and
real-time fan-out behind one uvicorn server.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

import asyncio
import signal
import sys

from dotenv import load_dotenv

from src.core.config import ConfigValidationError, validate_and_log_config
from src.core.logger import logger


async def main() -> None:
    """
    Main entry point.

    Loads .env, validates configuration, then serves until SIGINT/SIGTERM.
    """
    load_dotenv()

    try:
        validate_and_log_config()
    except ConfigValidationError as e:
        logger.error("Invalid Configuration", [("Error", str(e)[:200])])
        sys.exit(1)

    # Imported after load_dotenv so API config sees .env values
    from src.api import APIService

    logger.tree("ROMOD STARTING", [
        ("Server", "discord.gg/syria"),
    ], emoji="🔥")

    service = APIService()
    stop = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            pass

    await service.start()

    waiter = asyncio.ensure_future(service.wait())
    stopper = asyncio.ensure_future(stop.wait())
    await asyncio.wait({waiter, stopper}, return_when=asyncio.FIRST_COMPLETED)
    stopper.cancel()

    await service.stop()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("RoMod stopped by user (Ctrl+C)")
