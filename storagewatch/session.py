"""Per-invocation HTTP session, request building and sending."""

import asyncio
import logging
import re
import ssl
import time
from typing import Dict, Mapping, Optional

import aiohttp
import certifi
from yarl import URL

from .base import (
    EPOCH_PLACEHOLDER,
    NetworkError,
    OutboundRequest,
    RequestConstructionError,
    SessionSetupError,
    StatusMismatchError,
)
from .config import DEFAULT_TIMEOUT_MS

logger = logging.getLogger(__name__)

# RFC 7230 token characters
_METHOD_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


def current_unix_time_millis() -> int:
    return time.time_ns() // 1_000_000


class StorageSession:
    """An aiohttp client plus the cookie jar that carries login state.

    The client itself never stores cookies; they only enter the jar through
    send() when a response has the expected status.
    """

    def __init__(
        self,
        client: aiohttp.ClientSession,
        cookie_jar: aiohttp.CookieJar,
        timeout_ms: int,
    ):
        self.client = client
        self.cookie_jar = cookie_jar
        self.timeout_ms = timeout_ms

    @property
    def closed(self) -> bool:
        return self.client.closed

    async def close(self):
        if not self.client.closed:
            await self.client.close()

    async def __aenter__(self) -> "StorageSession":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()


async def create_session(
    timeout_millis: int = DEFAULT_TIMEOUT_MS, *, unsafe_cookies: bool = False
) -> StorageSession:
    """Create a session that returns redirects instead of following them.

    Args:
        timeout_millis: Total timeout for each request
        unsafe_cookies: Accept cookies from IP address hosts (local servers)
    """
    try:
        cookie_jar = aiohttp.CookieJar(unsafe=unsafe_cookies)
    except (RuntimeError, ValueError) as e:
        raise SessionSetupError(f"Couldn't create cookie jar. {e}") from e

    try:
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(
            ssl=ssl_context,
            limit=1,  # Requests are strictly sequential
            enable_cleanup_closed=True,
        )
        client = aiohttp.ClientSession(
            connector=connector,
            cookie_jar=aiohttp.DummyCookieJar(),
            timeout=aiohttp.ClientTimeout(total=timeout_millis / 1000),
        )
    except (RuntimeError, ValueError, OSError) as e:
        raise SessionSetupError(f"Couldn't create http client. {e}") from e

    logger.debug(f"Created session with timeout {timeout_millis} ms")
    return StorageSession(client, cookie_jar, timeout_millis)


def merge_headers(*header_maps: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Merge header mappings, later values replacing earlier ones.

    Header names are compared case-insensitively and the last spelling wins.
    """
    merged: Dict[str, str] = {}
    for headers in header_maps:
        if not headers:
            continue
        for key, val in headers.items():
            for existing in [k for k in merged if k.lower() == key.lower()]:
                del merged[existing]
            merged[key] = val
    return merged


def build_request(
    method: str,
    url_template: str,
    payload: Optional[bytes] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> OutboundRequest:
    url = url_template.replace(EPOCH_PLACEHOLDER, str(current_unix_time_millis()))

    if not method or not _METHOD_RE.match(method):
        raise RequestConstructionError(
            f"Couldn't create request for {method} {url}. Invalid method"
        )
    try:
        parsed = URL(url)
    except (TypeError, ValueError) as e:
        raise RequestConstructionError(
            f"Couldn't create request for {method} {url}. {e}"
        ) from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise RequestConstructionError(
            f"Couldn't create request for {method} {url}. Not an absolute http(s) URL"
        )

    return OutboundRequest(
        method=method,
        url=url,
        payload=payload or b"",
        headers=merge_headers(headers),
    )


async def send(
    session: StorageSession, request: OutboundRequest, expected_status: int
) -> bytes:
    """Send request and return the full response body.

    Raises StatusMismatchError (carrying the body) if the status differs
    from expected_status. Cookies are only kept from matching responses.
    """
    url = URL(request.url)
    cookies = session.cookie_jar.filter_cookies(url)

    try:
        async with session.client.request(
            request.method,
            url,
            data=request.payload or None,
            headers=dict(request.headers),
            cookies=cookies or None,
            allow_redirects=False,
        ) as response:
            body = await response.read()
            status = response.status
            final_url = response.url
            response_cookies = response.cookies
    except asyncio.TimeoutError as e:
        raise NetworkError(
            f"Request timed out after {session.timeout_ms} ms for {url.with_query(None)}"
        ) from e
    except aiohttp.ClientError as e:
        raise NetworkError(f"Couldn't send http request. {e}") from e

    logger.debug(f"{request.method} {final_url.with_query(None)} -> {status}")

    if status != expected_status:
        raise StatusMismatchError(expected_status, status, str(final_url), body)

    session.cookie_jar.update_cookies(response_cookies, final_url)
    return body
