"""Notification of newly available förråd."""

import logging
from typing import Optional, Protocol

from telegram import Bot
from telegram.error import TelegramError

from .base import STORAGE_PAGE_PATH, DEFAULT_SITE_URL, PublishError
from .config import Config

logger = logging.getLogger(__name__)

SUBJECT = "Nytt förråd!"
MESSAGE = (
    "Det verkar finnas ett nytt förråd tillgängligt!\n\n"
    f"Gå till {DEFAULT_SITE_URL}{STORAGE_PAGE_PATH} för att kontrollera"
)


class Publisher(Protocol):
    async def publish(self, subject: str, message: str, topic: str) -> None:
        ...


class TelegramPublisher:
    """Publishes to a Telegram chat or channel; the topic is its chat id."""

    def __init__(self, bot_token: str):
        self.bot_token = bot_token

    @staticmethod
    def format_message(subject: str, message: str) -> str:
        return f"*{subject}*\n\n{message}"

    async def publish(self, subject: str, message: str, topic: str) -> None:
        try:
            async with Bot(token=self.bot_token) as bot:
                await bot.send_message(
                    chat_id=topic,
                    text=self.format_message(subject, message),
                    parse_mode="Markdown",
                    disable_web_page_preview=True,
                )
        except TelegramError as e:
            raise PublishError(f"Couldn't publish to {topic}. {e}") from e
        logger.info(f"Notification sent to {topic}")


async def notify(
    available: bool, config: Config, publisher: Optional[Publisher] = None
):
    """Publish the fixed notification if available is True.

    There is no record of earlier runs, so every positive check notifies.
    """
    if not available:
        return

    logger.info("New förråd detected!")

    topic = config.topic
    if publisher is None:
        publisher = TelegramPublisher(config.bot_token)

    await publisher.publish(SUBJECT, MESSAGE, topic)
