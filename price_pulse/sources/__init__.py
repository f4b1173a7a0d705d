"""Price source interface and implementations.

Every source implements ``fetch_quote(pair_id) -> int`` and raises
``FetchFailure`` when it cannot produce a price.
"""

from abc import ABC, abstractmethod


class PriceSource(ABC):
    """Abstract base class for all price sources."""

    @abstractmethod
    async def fetch_quote(self, pair_id: str) -> int:
        """Fetch the current price of a pair in integer units of its quote currency.

        Args:
            pair_id: Tracked pair identifier, e.g. "USDTIRT"

        Raises:
            FetchFailure: If the price could not be obtained
        """
        pass


__all__ = ["PriceSource"]
