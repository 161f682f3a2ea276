"""Shared types, constants and errors for the förråd watcher."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

DEFAULT_SITE_URL = "https://www.stockholmshem.se"

# Paths are relative to the configured site URL
LOGIN_PATH = "/logga-in/?returnUrl=/mina-sidor/smaforrad/"
WIDGETS_PATH = (
    "/widgets/?callback=jQuery17105048823634686723_{epoch}"
    "&widgets%5B%5D=alert&widgets%5B%5D=objektlista%40forrad&_={epoch}"
)
STORAGE_PAGE_PATH = "/mina-sidor/smaforrad/"

# Replaced with the current unix time in milliseconds when a request is built
EPOCH_PLACEHOLDER = "{epoch}"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

DEFAULT_HEADERS = MappingProxyType({
    "User-Agent": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_0) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/84.0.4147.89 Safari/537.36",
    "Accept": "*/*",
    "Content-Type": FORM_CONTENT_TYPE,
})


@dataclass(frozen=True)
class OutboundRequest:
    method: str
    url: str
    payload: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # Freeze the header mapping so the request can't change after it is built
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))


class StorageWatchError(Exception):
    """Base exception for watcher errors"""
    pass


class ConfigurationError(StorageWatchError):
    """Raised when a required configuration value is missing"""

    def __init__(self, variable: str):
        self.variable = variable
        super().__init__(f"Missing environment variable: {variable}")


class SessionSetupError(StorageWatchError):
    """Raised when the HTTP session or its cookie jar can't be created"""
    pass


class RequestConstructionError(StorageWatchError):
    """Raised when a method/URL pair can't form a valid request"""
    pass


class NetworkError(StorageWatchError):
    """Raised when a request fails at the transport level"""
    pass


class StatusMismatchError(StorageWatchError):
    """Raised when a response status differs from the expected one.

    The response body is kept on the error so callers can inspect it.
    """

    def __init__(self, wanted: int, got: int, url: str, body: Optional[bytes] = None):
        self.wanted = wanted
        self.got = got
        self.url = url
        self.body = body if body is not None else b""
        super().__init__(f"Status code mismatch. Wanted {wanted} got {got} for {url}")


class PublishError(StorageWatchError):
    """Raised when the notification channel rejects a message"""
    pass
