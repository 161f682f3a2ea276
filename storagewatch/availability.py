"""Availability check against the storage-unit listing widget."""

import logging
from typing import Callable, Mapping, Optional

from .base import WIDGETS_PATH
from .config import Config
from .session import StorageSession, build_request, send

logger = logging.getLogger(__name__)

# "The search returned no hits"
NO_RESULTS_MARKER = "Sökningen gav inga träffar"

# Takes the raw widget response, returns True if units look available
AvailabilityInterpreter = Callable[[bytes], bool]


class MarkerInterpreter:
    """Treats the listing as non-empty when the no-results marker is absent.

    The match is literal and case-sensitive. If the site rewords or escapes
    the marker this reports availability on every run.
    """

    def __init__(self, marker: str = NO_RESULTS_MARKER):
        self.marker = marker

    def __call__(self, body: bytes) -> bool:
        return self.marker not in body.decode("utf-8", errors="replace")


async def check_availability(
    session: StorageSession,
    config: Config,
    headers: Mapping[str, str],
    interpreter: Optional[AvailabilityInterpreter] = None,
) -> bool:
    if interpreter is None:
        interpreter = MarkerInterpreter()

    request = build_request("GET", config.site_url + WIDGETS_PATH, None, headers)

    logger.info("Checking for förråd...")
    body = await send(session, request, 200)

    available = interpreter(body)
    logger.info(f"Förråd available: {available}")
    return available
