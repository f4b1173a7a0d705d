"""
Application wiring: registry, scheduler, dispatcher and command routing.

The app is transport-agnostic; the CLI attaches the Telegram transport and
notifier for real runs, tests attach in-memory ones.
"""
import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, Optional

from .config.schema import AppConfig
from .core.dispatcher import BroadcastDispatcher, utc_now
from .core.registry import SubscriptionRegistry
from .core.scheduler import Scheduler
from .notifiers import Notifier
from .notifiers.telegram import LogNotifier
from .sources import PriceSource
from .sources.nobitex import NobitexPriceSource
from .telegram.events import (
    ConfirmEvent,
    ContactEvent,
    HelpEvent,
    InboundEvent,
    MenuEvent,
    ToggleEvent,
    UnsubscribeEvent,
)
from .telegram.handlers import Reply, SubscriptionHandlers
from .telegram.router import EventRouter
from .telegram.security import ChatGate

logger = logging.getLogger(__name__)

PRICE_UPDATE_JOB = "sendPriceUpdate"
INITIAL_UPDATE_JOB = "initialPriceUpdate"


class PricePulseApp:
    """Owns the core components and their lifecycle."""

    def __init__(
        self,
        config: AppConfig,
        price_source: Optional[PriceSource] = None,
        notifier: Optional[Notifier] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the app.

        Args:
            config: Loaded application config
            price_source: Quote source (defaults to Nobitex)
            notifier: Outbound delivery (defaults to logging only)
            clock: UTC clock for digest headers
        """
        self.config = config
        self.registry = SubscriptionRegistry(pair.pair_id for pair in config.pairs)
        self.scheduler = Scheduler()
        self.price_source = price_source or NobitexPriceSource(config.price_source)
        self.notifier = notifier or LogNotifier()
        self.dispatcher = BroadcastDispatcher(
            self.registry,
            config.pairs,
            self.price_source,
            self.notifier,
            fetch_timeout_s=config.schedule.fetch_timeout_s,
            clock=clock,
        )
        self.handlers = SubscriptionHandlers(self.registry, config.schedule.tick_interval_s)
        self.router = self._setup_router()

    def _setup_router(self) -> EventRouter:
        router = EventRouter(ChatGate.from_config(self.config.telegram.allow_groups))
        router.register(ContactEvent, self.handlers.handle_contact)
        router.register(MenuEvent, self.handlers.handle_menu)
        router.register(ToggleEvent, self.handlers.handle_toggle)
        router.register(ConfirmEvent, self.handlers.handle_confirm)
        router.register(UnsubscribeEvent, self.handlers.handle_unsubscribe)
        router.register(HelpEvent, self.handlers.handle_help)
        return router

    def attach_notifier(self, notifier: Notifier):
        """Swap the outbound notifier; takes effect from the next tick."""
        self.notifier = notifier
        self.dispatcher.notifier = notifier

    async def start(self):
        """Schedule the recurring price update."""
        interval = self.config.schedule.tick_interval_s
        self.scheduler.schedule_recurring(PRICE_UPDATE_JOB, interval, self.dispatcher.run_tick)
        if self.config.schedule.run_on_start:
            self.scheduler.schedule_once(INITIAL_UPDATE_JOB, 0, self.dispatcher.run_tick)
        logger.info(f"Price Pulse started: {len(self.config.pairs)} pairs, tick every {interval}s")

    async def stop(self):
        await self.scheduler.shutdown()
        logger.info("Price Pulse stopped")

    async def handle(self, event: InboundEvent) -> Reply:
        """Process one inbound event and return the reply to show."""
        return await self.router.route(event)

    async def fetch_lines(self) -> Dict[str, str]:
        """Fetch every tracked pair once and return the formatted lines."""
        quotes = await self.dispatcher.fetch_all()
        return self.dispatcher.build_lines(quotes)


def run_quotes(config: AppConfig) -> Dict[str, str]:
    """Blocking helper for the ``quotes`` command."""
    app = PricePulseApp(config)
    return asyncio.run(app.fetch_lines())
