import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from price_pulse.config.schema import AppConfig, ScheduleConfig, TrackedPair, default_pairs
from price_pulse.core.dispatcher import BroadcastDispatcher
from price_pulse.core.registry import SubscriptionRegistry
from price_pulse.testing import FakePriceSource, MemoryNotifier


FIXED_NOW = datetime(2024, 3, 5, 7, 9, 42, tzinfo=timezone.utc)


@pytest.fixture
def pairs() -> List[TrackedPair]:
    """USDTIRT and BTCIRT, both quoted in IRR."""
    return default_pairs()


@pytest.fixture
def registry(pairs) -> SubscriptionRegistry:
    return SubscriptionRegistry(pair.pair_id for pair in pairs)


@pytest.fixture
def price_source() -> FakePriceSource:
    return FakePriceSource(prices={"USDTIRT": 58000, "BTCIRT": 3_900_000_000})


@pytest.fixture
def notifier() -> MemoryNotifier:
    return MemoryNotifier()


@pytest.fixture
def dispatcher(registry, pairs, price_source, notifier) -> BroadcastDispatcher:
    return BroadcastDispatcher(
        registry,
        pairs,
        price_source,
        notifier,
        fetch_timeout_s=1.0,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(schedule=ScheduleConfig(tick_interval_s=1800, fetch_timeout_s=1.0))
