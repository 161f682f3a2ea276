import asyncio
import logging
import sys
from typing import Mapping, Optional

from storagewatch import (
    DEFAULT_HEADERS,
    Config,
    Publisher,
    StorageSession,
    StorageWatchError,
    check_availability,
    create_session,
    login,
    notify,
)
from storagewatch.availability import AvailabilityInterpreter

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO
)
logger = logging.getLogger(__name__)


async def run_check(
    config: Config,
    *,
    session: Optional[StorageSession] = None,
    publisher: Optional[Publisher] = None,
    interpreter: Optional[AvailabilityInterpreter] = None,
    headers: Mapping[str, str] = DEFAULT_HEADERS,
) -> bool:
    """Log in, check the listing and notify if anything is available.

    Returns the availability flag. A session passed in is closed on return.
    """
    if session is None:
        session = await create_session(config.timeout_ms)

    async with session:
        await login(session, config, headers)
        available = await check_availability(session, config, headers, interpreter)

    await notify(available, config, publisher)
    return available


def handler(event=None, context=None):
    """Entry point for a scheduled serverless invocation. Raises on failure."""
    config = Config.from_env()
    logging.getLogger().setLevel(config.log_level)
    available = asyncio.run(run_check(config))
    return {"available": available}


async def main() -> int:
    try:
        config = Config.from_env()
        logging.getLogger().setLevel(config.log_level)
        await run_check(config)
    except StorageWatchError as e:
        logger.error(f"Check failed: {e}")
        return 1
    except RuntimeError as e:
        logger.error(f"Configuration problem: {e}")
        return 1
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Check stopped by user")
        sys.exit(130)
