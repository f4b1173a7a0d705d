"""
Command/callback parsing and event routing.

Maps raw message text and callback data to inbound events, and inbound
events to handler functions.
"""
import logging
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional, Type

from ..core.errors import Recipient
from .events import (
    ChatKind,
    ConfirmEvent,
    ContactEvent,
    HelpEvent,
    InboundEvent,
    MenuEvent,
    ToggleEvent,
    UnsubscribeEvent,
)
from .handlers import Reply
from .security import ChatGate

logger = logging.getLogger(__name__)

TOGGLE_PREFIX = "toggle_currency_"
CONFIRM_DATA = "confirm_currency"

# Command name -> event type
COMMAND_EVENTS: Dict[str, Type[InboundEvent]] = {
    "start": ContactEvent,
    "subscribe": MenuEvent,
    "unsubscribe": UnsubscribeEvent,
    "help": HelpEvent,
}


@dataclass
class ParsedCommand:
    """Result of parsing a command."""
    command: str


class CommandParser:
    """Parse Telegram messages into commands."""

    # /command or /command@botname; trailing text is ignored
    COMMAND_PATTERN = re.compile(r"^/([a-z_]+)(?:@\w+)?(?:\s.*)?$", re.IGNORECASE | re.DOTALL)

    @staticmethod
    def parse(text: str) -> Optional[ParsedCommand]:
        """
        Parse a message into a command.

        Args:
            text: User message text

        Returns:
            ParsedCommand if valid command, None otherwise
        """
        text = (text or "").strip()
        match = CommandParser.COMMAND_PATTERN.match(text)

        if not match:
            return None

        return ParsedCommand(command=match.group(1).lower())

    @staticmethod
    def to_event(
        parsed: ParsedCommand,
        recipient_id: Recipient,
        chat_kind: ChatKind = ChatKind.PRIVATE,
    ) -> Optional[InboundEvent]:
        """Event for a known command, None for anything else."""
        event_type = COMMAND_EVENTS.get(parsed.command)
        if event_type is None:
            return None
        return event_type(recipient_id=recipient_id, chat_kind=chat_kind)


class CallbackParser:
    """Parse inline keyboard callback data into events."""

    @staticmethod
    def toggle_data(pair_id: str) -> str:
        return f"{TOGGLE_PREFIX}{pair_id}"

    @staticmethod
    def parse(
        data: str,
        recipient_id: Recipient,
        chat_kind: ChatKind = ChatKind.PRIVATE,
    ) -> Optional[InboundEvent]:
        data = (data or "").strip()
        if data == CONFIRM_DATA:
            return ConfirmEvent(recipient_id=recipient_id, chat_kind=chat_kind)
        if data.startswith(TOGGLE_PREFIX) and len(data) > len(TOGGLE_PREFIX):
            return ToggleEvent(
                recipient_id=recipient_id,
                chat_kind=chat_kind,
                pair_id=data[len(TOGGLE_PREFIX):],
            )
        return None


EventHandler = Callable[[InboundEvent], Awaitable[Reply]]


class EventRouter:
    """Route inbound events to handler functions."""

    def __init__(self, gate: Optional[ChatGate] = None):
        """Initialize router."""
        self.gate = gate or ChatGate()
        self.handlers: Dict[Type[InboundEvent], EventHandler] = {}

    def register(self, event_type: Type[InboundEvent], handler: EventHandler) -> "EventRouter":
        """
        Register a handler for an event type.

        Returns:
            Self for chaining
        """
        self.handlers[event_type] = handler
        logger.debug(f"Registered handler for {event_type.__name__}")
        return self

    async def route(self, event: InboundEvent) -> Reply:
        """
        Route an event to its handler.

        Returns:
            Reply from handler, or an error reply
        """
        if not self.gate.allows(event):
            return Reply(text=self.gate.deny_message(), alert=isinstance(event, (ToggleEvent, ConfirmEvent)))

        handler = self.handlers.get(type(event))
        if handler is None:
            logger.warning(f"No handler registered for {type(event).__name__}")
            return Reply(text="❌ Unknown command.\nUse /help for available commands.")

        try:
            return await handler(event)
        except Exception as e:
            logger.error(f"Error in handler for {type(event).__name__}: {e}", exc_info=True)
            return Reply(text="❌ Error executing command. Please try again later.")
