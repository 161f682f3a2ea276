"""Login against Stockholmshem."""

import logging
from typing import Mapping, Optional
from urllib.parse import urlencode

from bs4 import BeautifulSoup

from .base import FORM_CONTENT_TYPE, LOGIN_PATH, StatusMismatchError
from .config import Config
from .session import StorageSession, build_request, merge_headers, send

logger = logging.getLogger(__name__)

# A successful login redirects to the returnUrl
LOGIN_SUCCESS_STATUS = 302

# Where the login form reports rejected credentials
_LOGIN_ERROR_SELECTORS = (
    ".validation-summary-errors",
    ".field-validation-error",
    ".error-message",
    ".alert-danger",
    ".error",
)


def build_login_payload(config: Config) -> bytes:
    """Return the form body for the login request.

    Values are substituted as-is unless ENCODE_CREDENTIALS is set, since the
    site has only been observed with the raw form.
    """
    user = config.personnr
    password = config.password

    if config.encode_credentials:
        return urlencode({"Username": user, "Password": password}).encode("utf-8")
    return f"Username={user}&Password={password}".encode("utf-8")


def describe_login_failure(body: bytes) -> Optional[str]:
    """Pull the validation message out of a returned login page, if any."""
    if not body:
        return None
    soup = BeautifulSoup(body.decode("utf-8", errors="replace"), "html.parser")
    for selector in _LOGIN_ERROR_SELECTORS:
        element = soup.select_one(selector)
        if element:
            text = " ".join(element.get_text(" ").split())
            if text:
                return text
    title = soup.find("title")
    if title and title.get_text(strip=True):
        return f"Page title: {title.get_text(strip=True)}"
    return None


async def login(session: StorageSession, config: Config, headers: Mapping[str, str]):
    payload = build_login_payload(config)

    request = build_request(
        "POST",
        config.site_url + LOGIN_PATH,
        payload,
        merge_headers(headers, {"Content-Type": FORM_CONTENT_TYPE}),
    )

    logger.info("Logging in...")
    try:
        await send(session, request, LOGIN_SUCCESS_STATUS)
    except StatusMismatchError as e:
        reason = describe_login_failure(e.body)
        if reason:
            logger.error(f"Login rejected with status {e.got}: {reason}")
        else:
            logger.error(f"Login rejected with status {e.got}")
        raise
    logger.info("Logged in")
