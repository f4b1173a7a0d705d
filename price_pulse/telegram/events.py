"""
Inbound events at the transport boundary.

Telegram updates are translated into these variants before anything touches
the registry, so handlers never inspect raw update shapes.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.errors import Recipient


class ChatKind(Enum):
    """Where an inbound event came from."""
    PRIVATE = "private"
    GROUP = "group"
    SUPERGROUP = "supergroup"
    CHANNEL = "channel"

    @classmethod
    def from_telegram(cls, chat_type: Optional[str]) -> "ChatKind":
        try:
            return cls(chat_type)
        except ValueError:
            # Unknown chat types are treated like channels and denied by default
            return cls.CHANNEL


@dataclass(frozen=True)
class InboundEvent:
    """Base event: who sent it and from what kind of chat."""
    recipient_id: Recipient
    chat_kind: ChatKind = ChatKind.PRIVATE


@dataclass(frozen=True)
class ContactEvent(InboundEvent):
    """First contact (/start)."""


@dataclass(frozen=True)
class MenuEvent(InboundEvent):
    """Request for the subscription menu (/subscribe)."""


@dataclass(frozen=True)
class ToggleEvent(InboundEvent):
    """Menu button press flipping one pair."""
    pair_id: str = ""


@dataclass(frozen=True)
class ConfirmEvent(InboundEvent):
    """Menu Confirm button."""


@dataclass(frozen=True)
class UnsubscribeEvent(InboundEvent):
    """Drop all subscriptions (/unsubscribe)."""


@dataclass(frozen=True)
class HelpEvent(InboundEvent):
    """Command help (/help)."""
