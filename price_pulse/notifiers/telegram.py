"""Telegram and log-only notifier implementations."""

import logging
from typing import Optional

from telegram import Bot
from telegram.error import TelegramError

from price_pulse.core.errors import DeliveryFailure, Recipient
from price_pulse.notifiers import Notifier

logger = logging.getLogger(__name__)


class TelegramNotifier(Notifier):
    """Sends messages with a python-telegram-bot ``Bot``.

    The bot is usually the one owned by the running ``Application`` so that
    inbound handling and outbound delivery share one HTTP client.
    """

    def __init__(self, bot: Bot, send_timeout_s: Optional[float] = None):
        self.bot = bot
        self.send_timeout_s = send_timeout_s
        self.sent_count = 0
        self.failed_count = 0

    async def send(self, recipient: Recipient, text: str) -> None:
        timeouts = {}
        if self.send_timeout_s is not None:
            timeouts = {"read_timeout": self.send_timeout_s, "write_timeout": self.send_timeout_s}
        try:
            await self.bot.send_message(chat_id=recipient, text=text, **timeouts)
        except TelegramError as e:
            self.failed_count += 1
            raise DeliveryFailure(recipient, f"{type(e).__name__}: {e}") from e

        self.sent_count += 1
        logger.debug(f"Telegram message sent to {recipient}: {len(text)} chars")


class LogNotifier(Notifier):
    """Logs messages instead of sending them."""

    def __init__(self, logger_instance=None):
        self.logger = logger_instance or logger

    async def send(self, recipient: Recipient, text: str) -> None:
        self.logger.info(f"[to {recipient}] {text}")


__all__ = ["TelegramNotifier", "LogNotifier"]
