"""Invocation configuration.

Values come from an optional JSON file and the process environment, the
environment taking precedence. Required values are only checked when they
are used, so a run that finds nothing never needs notification settings.
"""

import json
import logging
import os
from typing import Dict, Mapping, Optional

from .base import DEFAULT_SITE_URL, ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 10000

KNOWN_KEYS = (
    "PERSONNR",
    "PASSWORD",
    "TOPIC",
    "BOT_TOKEN",
    "SITE_URL",
    "TIMEOUT_MS",
    "ENCODE_CREDENTIALS",
    "LOG_LEVEL",
)

_TRUTHY = {"1", "true", "yes", "on"}


class Config:
    def __init__(
        self,
        values: Optional[Mapping[str, str]] = None,
        config_path: Optional[str] = None,
    ):
        self.config_path = config_path
        self._values: Dict[str, str] = {}
        if config_path:
            self.load_config()
        if values:
            self._values.update(
                {key: str(val) for key, val in values.items() if key in KNOWN_KEYS}
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """Build the configuration once at the start of an invocation."""
        environ = os.environ if environ is None else environ
        return cls(values=environ, config_path=environ.get("CONFIG_PATH"))

    def load_config(self):
        try:
            with open(self.config_path, "r") as f:
                config = json.load(f)
            if not isinstance(config, dict):
                raise RuntimeError(f"Invalid configuration in {self.config_path}!")
            self._values.update(
                {key: str(val) for key, val in config.items() if key in KNOWN_KEYS}
            )
            logger.info(f"Loaded configuration from {self.config_path}")
        except FileNotFoundError:
            raise RuntimeError(f"{self.config_path} not found!")
        except json.JSONDecodeError:
            raise RuntimeError(f"Invalid JSON in {self.config_path}!")

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def require(self, key: str) -> str:
        value = self._values.get(key)
        if value is None:
            raise ConfigurationError(key)
        return value

    @property
    def personnr(self) -> str:
        return self.require("PERSONNR")

    @property
    def password(self) -> str:
        return self.require("PASSWORD")

    @property
    def topic(self) -> str:
        return self.require("TOPIC")

    @property
    def bot_token(self) -> str:
        return self.require("BOT_TOKEN")

    @property
    def site_url(self) -> str:
        return (self._values.get("SITE_URL") or DEFAULT_SITE_URL).rstrip("/")

    @property
    def timeout_ms(self) -> int:
        raw = self._values.get("TIMEOUT_MS")
        if not raw:
            return DEFAULT_TIMEOUT_MS
        try:
            timeout = int(raw)
        except ValueError:
            raise RuntimeError(f"Invalid TIMEOUT_MS: {raw!r}")
        # A zero total timeout disables the bound in aiohttp
        if timeout <= 0:
            raise RuntimeError(f"Invalid TIMEOUT_MS: {raw!r}")
        return timeout

    @property
    def encode_credentials(self) -> bool:
        return (self._values.get("ENCODE_CREDENTIALS") or "").lower() in _TRUTHY

    @property
    def log_level(self) -> str:
        raw = self._values.get("LOG_LEVEL") or "INFO"
        level = raw.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise RuntimeError(f"Invalid LOG_LEVEL: {raw!r}")
        return level

    def __repr__(self) -> str:
        # Secrets are reported as present/absent only
        shown = {
            key: ("***" if key in ("PERSONNR", "PASSWORD", "BOT_TOKEN") else val)
            for key, val in self._values.items()
        }
        return f"Config({shown})"
