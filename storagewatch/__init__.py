"""Stockholmshem förråd watcher.

Logs in, checks the storage-unit listing and notifies when something
looks available.
"""

# Shared types and errors
from .base import (
    DEFAULT_HEADERS,
    ConfigurationError,
    NetworkError,
    OutboundRequest,
    PublishError,
    RequestConstructionError,
    SessionSetupError,
    StatusMismatchError,
    StorageWatchError,
)

# Configuration
from .config import Config

# Session management
from .session import (
    StorageSession,
    build_request,
    create_session,
    current_unix_time_millis,
    merge_headers,
    send,
)

# Workflow steps
from .auth import build_login_payload, login
from .availability import NO_RESULTS_MARKER, MarkerInterpreter, check_availability
from .notifier import MESSAGE, SUBJECT, Publisher, TelegramPublisher, notify

__all__ = [
    # Shared types and errors
    "DEFAULT_HEADERS",
    "ConfigurationError",
    "NetworkError",
    "OutboundRequest",
    "PublishError",
    "RequestConstructionError",
    "SessionSetupError",
    "StatusMismatchError",
    "StorageWatchError",
    # Configuration
    "Config",
    # Session management
    "StorageSession",
    "build_request",
    "create_session",
    "current_unix_time_millis",
    "merge_headers",
    "send",
    # Workflow steps
    "build_login_payload",
    "login",
    "NO_RESULTS_MARKER",
    "MarkerInterpreter",
    "check_availability",
    "MESSAGE",
    "SUBJECT",
    "Publisher",
    "TelegramPublisher",
    "notify",
]
