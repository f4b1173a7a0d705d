"""
Allow/deny decisions for inbound events.

The registry accepts any recipient; deciding which chats may subscribe is
the transport boundary's job.
"""
import logging
from typing import Iterable, Optional

from .events import ChatKind, InboundEvent

logger = logging.getLogger(__name__)


class ChatGate:
    """Admits events from allowed chat kinds."""

    def __init__(self, allowed_kinds: Optional[Iterable[ChatKind]] = None):
        """
        Initialize the gate.

        Args:
            allowed_kinds: Chat kinds allowed to subscribe. Defaults to
                private chats only.
        """
        self.allowed_kinds = frozenset(allowed_kinds or (ChatKind.PRIVATE,))

    @classmethod
    def from_config(cls, allow_groups: bool) -> "ChatGate":
        kinds = [ChatKind.PRIVATE]
        if allow_groups:
            kinds.extend([ChatKind.GROUP, ChatKind.SUPERGROUP])
        return cls(kinds)

    def allows(self, event: InboundEvent) -> bool:
        allowed = event.chat_kind in self.allowed_kinds
        if not allowed:
            logger.info(
                f"Denied {type(event).__name__} from {event.chat_kind.value} chat {event.recipient_id}"
            )
        return allowed

    def deny_message(self) -> str:
        return "❌ Price Pulse only works in private chats."
