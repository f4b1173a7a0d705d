import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from telegram.error import Forbidden, NetworkError

from price_pulse.core.errors import DeliveryFailure
from price_pulse.notifiers.telegram import LogNotifier, TelegramNotifier
from price_pulse.testing import MemoryNotifier


def make_bot():
    bot = MagicMock()
    bot.send_message = AsyncMock()
    return bot


@pytest.mark.asyncio
class TestTelegramNotifier:
    """Delivery through a mocked python-telegram-bot Bot."""

    async def test_send_uses_chat_id(self):
        bot = make_bot()
        notifier = TelegramNotifier(bot)

        await notifier.send(12345, "hello")

        bot.send_message.assert_awaited_once_with(chat_id=12345, text="hello")
        assert notifier.sent_count == 1

    async def test_send_timeout_forwarded(self):
        bot = make_bot()
        notifier = TelegramNotifier(bot, send_timeout_s=4.0)

        await notifier.send(1, "hi")

        bot.send_message.assert_awaited_once_with(chat_id=1, text="hi", read_timeout=4.0, write_timeout=4.0)

    async def test_blocked_bot_raises_delivery_failure(self):
        bot = make_bot()
        bot.send_message.side_effect = Forbidden("bot was blocked by the user")
        notifier = TelegramNotifier(bot)

        with pytest.raises(DeliveryFailure) as exc:
            await notifier.send(7, "hi")

        assert exc.value.recipient == 7
        assert "Forbidden" in exc.value.reason
        assert notifier.failed_count == 1
        assert notifier.sent_count == 0

    async def test_network_error_raises_delivery_failure(self):
        bot = make_bot()
        bot.send_message.side_effect = NetworkError("timed out")

        with pytest.raises(DeliveryFailure):
            await TelegramNotifier(bot).send(7, "hi")


@pytest.mark.asyncio
class TestLogNotifier:
    """Log-only delivery."""

    async def test_logs_message(self, caplog):
        notifier = LogNotifier()
        with caplog.at_level(logging.INFO, logger="price_pulse.notifiers.telegram"):
            await notifier.send(3, "digest body")
        assert "[to 3] digest body" in caplog.text

    async def test_custom_logger(self):
        custom = MagicMock()
        await LogNotifier(custom).send("chan", "x")
        custom.info.assert_called_once_with("[to chan] x")


@pytest.mark.asyncio
class TestMemoryNotifier:
    """In-memory notifier used across the suite."""

    async def test_records_and_fails_selectively(self):
        notifier = MemoryNotifier(failing={2})
        await notifier.send(1, "a")
        with pytest.raises(DeliveryFailure):
            await notifier.send(2, "b")

        assert notifier.messages == [(1, "a")]
        assert notifier.attempts == [1, 2]
