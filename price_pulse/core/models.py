"""
Value types shared by the registry, dispatcher and formatter.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from .errors import Recipient


@dataclass(frozen=True)
class SubscriberView:
    """Point-in-time copy of one subscriber's subscriptions."""
    recipient: Recipient
    pairs: Tuple[str, ...]

    @property
    def is_active(self) -> bool:
        return bool(self.pairs)


@dataclass(frozen=True)
class Quote:
    """Price of one pair at one tick, or the reason it could not be fetched."""
    pair_id: str
    price: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.price is not None

    @classmethod
    def success(cls, pair_id: str, price: int) -> "Quote":
        return cls(pair_id=pair_id, price=price)

    @classmethod
    def failure(cls, pair_id: str, error: str) -> "Quote":
        return cls(pair_id=pair_id, error=error or "unknown error")


@dataclass
class TickReport:
    """Outcome of one broadcast tick."""
    started_at: datetime
    skipped: bool = False
    skip_reason: str = ""
    quotes: Dict[str, Quote] = field(default_factory=dict)
    delivered: List[Recipient] = field(default_factory=list)
    failed: List[Recipient] = field(default_factory=list)

    @property
    def failed_pairs(self) -> List[str]:
        return [pair_id for pair_id, quote in self.quotes.items() if not quote.ok]

    def summary(self) -> str:
        if self.skipped:
            return f"tick skipped ({self.skip_reason})"
        return (
            f"tick done: {len(self.quotes)} quotes "
            f"({len(self.failed_pairs)} failed), "
            f"{len(self.delivered)} delivered, {len(self.failed)} failed deliveries"
        )
