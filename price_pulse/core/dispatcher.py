"""
Broadcast dispatcher: one tick of fetch, format and fan-out.

Each tick fetches every tracked pair once, regardless of subscriber count,
and sends each active subscriber a digest of only the pairs they chose.
Failures stay local: a failed fetch degrades one line, a failed send skips
one subscriber.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Sequence

from ..config.schema import TrackedPair
from ..sources import PriceSource
from ..notifiers import Notifier
from .formatter import compose_digest, format_header, format_line
from .models import Quote, SubscriberView, TickReport
from .registry import SubscriptionRegistry

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BroadcastDispatcher:
    """Runs broadcast ticks against a registry snapshot."""

    def __init__(
        self,
        registry: SubscriptionRegistry,
        pairs: Sequence[TrackedPair],
        price_source: PriceSource,
        notifier: Notifier,
        fetch_timeout_s: Optional[float] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the dispatcher.

        Args:
            registry: Subscription registry to snapshot each tick
            pairs: Tracked pairs fetched every tick
            price_source: Source of quotes
            notifier: Outbound message delivery
            fetch_timeout_s: Upper bound per fetch; None leaves it to the source
            clock: Returns the current time (UTC) for digest headers
        """
        self.registry = registry
        self.pairs = list(pairs)
        self.price_source = price_source
        self.notifier = notifier
        self.fetch_timeout_s = fetch_timeout_s
        self.clock = clock

        self.tick_count = 0
        self.skipped_count = 0
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def run_tick(self) -> TickReport:
        """Fetch all pairs and deliver digests to every active subscriber."""
        report = TickReport(started_at=self.clock())

        if self._in_flight:
            logger.warning("Previous tick still in flight; skipping this tick")
            return self._skip(report, "previous tick in flight")

        # Snapshot before the first await; later registry changes apply next tick
        snapshot = self.registry.snapshot()
        if not snapshot:
            logger.warning("No users subscribed. Waiting for /start command.")
            return self._skip(report, "no subscribers")

        active = [entry for entry in snapshot if entry.is_active]
        if not active:
            logger.info("No subscriber has selected a pair; nothing to send")
            return self._skip(report, "no active subscriptions")

        self._in_flight = True
        self.tick_count += 1
        try:
            report.quotes = await self.fetch_all()
            lines = self.build_lines(report.quotes)
            header = format_header(self.clock())
            await self._deliver(active, header, lines, report)
        finally:
            self._in_flight = False

        logger.info(report.summary())
        return report

    async def fetch_all(self) -> Dict[str, Quote]:
        """Fetch every tracked pair concurrently; failures become failure markers."""
        quotes = await asyncio.gather(*(self._fetch(pair.pair_id) for pair in self.pairs))
        return {quote.pair_id: quote for quote in quotes}

    def build_lines(self, quotes: Dict[str, Quote]) -> Dict[str, str]:
        lines = {}
        for pair in self.pairs:
            quote = quotes.get(pair.pair_id) or Quote.failure(pair.pair_id, "not fetched")
            lines[pair.pair_id] = format_line(pair.pair_id, quote, pair.base, pair.quote)
        return lines

    async def _fetch(self, pair_id: str) -> Quote:
        try:
            if self.fetch_timeout_s is None:
                price = await self.price_source.fetch_quote(pair_id)
            else:
                price = await asyncio.wait_for(
                    self.price_source.fetch_quote(pair_id),
                    timeout=self.fetch_timeout_s,
                )
            return Quote.success(pair_id, price)
        except asyncio.TimeoutError:
            logger.error(f"Timed out fetching price for {pair_id}")
            return Quote.failure(pair_id, f"timed out after {self.fetch_timeout_s}s")
        except Exception as e:
            logger.error(f"Error fetching price for {pair_id}: {e}", exc_info=True)
            return Quote.failure(pair_id, str(e))

    async def _deliver(
        self,
        subscribers: Sequence[SubscriberView],
        header: str,
        lines: Dict[str, str],
        report: TickReport,
    ):
        for entry in subscribers:
            digest = compose_digest(header, [lines[pair_id] for pair_id in entry.pairs if pair_id in lines])
            try:
                await self.notifier.send(entry.recipient, digest)
                report.delivered.append(entry.recipient)
            except Exception as e:
                logger.error(f"Error sending price update to {entry.recipient}: {e}", exc_info=True)
                report.failed.append(entry.recipient)

    def _skip(self, report: TickReport, reason: str) -> TickReport:
        self.skipped_count += 1
        report.skipped = True
        report.skip_reason = reason
        return report
