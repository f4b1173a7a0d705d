"""Nobitex order-book price source."""

from __future__ import annotations

import asyncio
import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict

import requests

from price_pulse.config.schema import PriceSourceConfig
from price_pulse.core.errors import FetchFailure
from price_pulse.sources import PriceSource

logger = logging.getLogger(__name__)


class NobitexPriceSource(PriceSource):
    """Reads the best ask from ``GET /v2/orderbook/<pair>``.

    The blocking ``requests`` call runs in a worker thread so concurrent
    fetches do not stall the event loop. The request timeout comes from
    config; a stalled request surfaces as ``FetchFailure``.
    """

    def __init__(self, config: PriceSourceConfig, session: requests.Session | None = None):
        self.config = config
        self.host = config.base_url.rstrip("/")
        self.session = session or requests.Session()

    async def fetch_quote(self, pair_id: str) -> int:
        return await asyncio.to_thread(self._fetch_quote_sync, pair_id)

    def _fetch_quote_sync(self, pair_id: str) -> int:
        url = f"{self.host}/v2/orderbook/{pair_id}"
        try:
            resp = self.session.get(url, timeout=self.config.timeout_s)
            resp.raise_for_status()
            payload = resp.json()
        except requests.RequestException as e:
            logger.warning("Order book request failed for %s: %s", pair_id, e)
            raise FetchFailure(pair_id, f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            raise FetchFailure(pair_id, "response is not valid JSON") from e

        return self.parse_best_ask(pair_id, payload)

    @staticmethod
    def parse_best_ask(pair_id: str, payload: Dict[str, Any]) -> int:
        """Best ask price from an order-book payload, rounded half-up to an integer."""
        if not isinstance(payload, dict):
            raise FetchFailure(pair_id, "unexpected payload shape")
        status = payload.get("status", "ok")
        if status != "ok":
            raise FetchFailure(pair_id, f"API status {status!r}")

        asks = payload.get("asks") or []
        try:
            best_ask = asks[0][0]
            price = Decimal(str(best_ask))
        except (IndexError, TypeError, KeyError) as e:
            raise FetchFailure(pair_id, "order book has no asks") from e
        except InvalidOperation as e:
            raise FetchFailure(pair_id, f"non-numeric ask price {asks[0][0]!r}") from e

        if not price.is_finite():
            raise FetchFailure(pair_id, f"non-numeric ask price {best_ask!r}")
        return int(price.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
