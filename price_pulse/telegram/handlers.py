"""
Subscription command handlers.

Each handler:
1. Forwards the event to the registry
2. Turns registry misuse errors into a user-facing answer
3. Returns a transport-neutral Reply

No network calls here; the transport renders and sends the Reply.
"""
import logging
import textwrap
from dataclasses import dataclass
from typing import Optional, Tuple

from ..core.errors import UnknownPair, UnknownRecipient
from ..core.registry import SubscriptionRegistry
from .events import (
    ConfirmEvent,
    ContactEvent,
    HelpEvent,
    MenuEvent,
    ToggleEvent,
    UnsubscribeEvent,
)

logger = logging.getLogger(__name__)

MENU_PROMPT = "Please select your preferred currencies:"


@dataclass(frozen=True)
class KeyboardButton:
    """One pair button: pair id and whether the recipient is subscribed."""
    pair_id: str
    active: bool


@dataclass(frozen=True)
class Reply:
    """What the transport should show in response to an event."""
    text: str
    keyboard: Optional[Tuple[KeyboardButton, ...]] = None
    # Show as a transient popup answer to a button press
    alert: bool = False
    # Edit the menu message in place instead of sending a new one
    edit_menu: bool = False
    # Remove the menu message before sending text
    close_menu: bool = False


class SubscriptionHandlers:
    """Handlers for /start, /subscribe, menu buttons and /unsubscribe."""

    def __init__(self, registry: SubscriptionRegistry, tick_interval_s: float = 30 * 60):
        """
        Initialize handlers.

        Args:
            registry: Subscription registry events are forwarded to
            tick_interval_s: Digest cadence, quoted in user-facing texts
        """
        self.registry = registry
        self.tick_interval_s = tick_interval_s

    @property
    def cadence_text(self) -> str:
        return describe_interval(self.tick_interval_s)

    async def handle_contact(self, event: ContactEvent) -> Reply:
        self.registry.ensure(event.recipient_id)
        return Reply(text=self.welcome_text())

    async def handle_menu(self, event: MenuEvent) -> Reply:
        self.registry.ensure(event.recipient_id)
        return Reply(text=MENU_PROMPT, keyboard=self.keyboard_for(event.recipient_id))

    async def handle_toggle(self, event: ToggleEvent) -> Reply:
        try:
            self.registry.toggle(event.recipient_id, event.pair_id)
        except UnknownRecipient:
            return Reply(text="Please send /start first.", alert=True)
        except UnknownPair:
            return Reply(text=f"❌ Unknown currency: {event.pair_id}", alert=True)

        return Reply(
            text=MENU_PROMPT,
            keyboard=self.keyboard_for(event.recipient_id),
            edit_menu=True,
        )

    async def handle_confirm(self, event: ConfirmEvent) -> Reply:
        try:
            pairs = self.registry.subscriptions(event.recipient_id)
        except UnknownRecipient:
            return Reply(text="Please send /start first.", alert=True)

        if not pairs:
            return Reply(text="⚠️ Please select at least one currency.", alert=True)

        text = (
            f"✅ Your selected currencies: \n{', '.join(pairs)} \n\n"
            f"From now on, I will send you the prices of these currencies {self.cadence_text}."
        )
        return Reply(text=text, close_menu=True)

    async def handle_unsubscribe(self, event: UnsubscribeEvent) -> Reply:
        self.registry.clear(event.recipient_id)
        return Reply(text="Your subscriptions have been successfully canceled!")

    async def handle_help(self, event: HelpEvent) -> Reply:
        return Reply(text=textwrap.dedent("""
            📖 Price Pulse Commands

            /start - Register and show the welcome message
            /subscribe - Choose the currencies you want to follow
            /unsubscribe - Stop all price updates
            /help - Show this help
        """).strip())

    def keyboard_for(self, recipient) -> Tuple[KeyboardButton, ...]:
        return tuple(
            KeyboardButton(pair_id=pair_id, active=self.registry.is_subscribed(recipient, pair_id))
            for pair_id in self.registry.tracked_pairs
        )

    def welcome_text(self) -> str:
        return (
            "🌐 Welcome to Price Pulse! 🌐 \n\n"
            "🤖 Price Pulse is your smart assistant for real-time currency price monitoring! 💹 \n\n"
            f"✨ {self.cadence_text.capitalize()}, I will inform you of the latest prices of your "
            "selected currencies. Just select the currencies you want and leave the rest to me! 🕒 \n\n"
            "✅ How to get started? \n"
            "1. Send the command /subscribe. \n"
            "2. In the menu that appears, enable or disable the currencies you want by clicking "
            "on the buttons below. \n"
            '3. After selecting, click the "Confirm" button. \n\n'
            f"From now on, I will send you the prices of your selected currencies {self.cadence_text}! 📊"
        )


def describe_interval(seconds: float) -> str:
    """Human phrase for a cadence, e.g. 1800 -> 'every half hour'."""
    seconds = int(seconds)
    if seconds == 30 * 60:
        return "every half hour"
    if seconds == 60 * 60:
        return "every hour"
    if seconds % 3600 == 0:
        return f"every {seconds // 3600} hours"
    if seconds % 60 == 0:
        minutes = seconds // 60
        return "every minute" if minutes == 1 else f"every {minutes} minutes"
    return f"every {seconds} seconds"
