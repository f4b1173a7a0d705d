"""Notifier interface for outbound price digests.

Implementations:
  - TelegramNotifier: sends through the Telegram Bot API
  - LogNotifier: only logs, for dry runs
  - MemoryNotifier (price_pulse.testing): stores messages for tests

All implement ``send(recipient, text)`` and raise ``DeliveryFailure`` when a
message cannot be delivered.
"""

from abc import ABC, abstractmethod

from price_pulse.core.errors import Recipient


class Notifier(ABC):
    """Abstract base class for all notifiers."""

    @abstractmethod
    async def send(self, recipient: Recipient, text: str) -> None:
        """Deliver a message to one recipient.

        Args:
            recipient: Transport-assigned recipient id
            text: Message text

        Raises:
            DeliveryFailure: If the message could not be delivered
        """
        pass


__all__ = ["Notifier"]
