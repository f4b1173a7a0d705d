"""
Subscription registry.

Owns the recipient -> subscribed pairs mapping. Callers only ever see
immutable copies; every mutation goes through ensure/toggle/clear so a
broadcast working from a snapshot cannot be disturbed by inbound commands.
"""
import logging
from typing import Dict, Iterable, Tuple

from .errors import Recipient, UnknownPair, UnknownRecipient
from .models import SubscriberView

logger = logging.getLogger(__name__)


class SubscriptionRegistry:
    """In-memory subscriber registry keyed by transport recipient id."""

    def __init__(self, tracked_pairs: Iterable[str]):
        """
        Initialize the registry.

        Args:
            tracked_pairs: Pair ids subscribers may opt into
        """
        self.tracked_pairs: Tuple[str, ...] = tuple(tracked_pairs)
        self._tracked = frozenset(self.tracked_pairs)
        # dict keys as an insertion-ordered set of pair ids
        self._subscribers: Dict[Recipient, Dict[str, None]] = {}

    def ensure(self, recipient: Recipient) -> bool:
        """Register a recipient on first contact. Returns True if newly created."""
        if recipient in self._subscribers:
            return False
        self._subscribers[recipient] = {}
        logger.info(f"New subscriber registered: {recipient}")
        return True

    def toggle(self, recipient: Recipient, pair_id: str) -> bool:
        """
        Flip a recipient's subscription to a pair.

        Returns:
            True if the recipient is subscribed after the call

        Raises:
            UnknownRecipient: If ensure() was never called for the recipient
            UnknownPair: If pair_id is not tracked
        """
        if recipient not in self._subscribers:
            raise UnknownRecipient(recipient)
        if pair_id not in self._tracked:
            raise UnknownPair(pair_id)

        pairs = self._subscribers[recipient]
        if pair_id in pairs:
            del pairs[pair_id]
            subscribed = False
        else:
            pairs[pair_id] = None
            subscribed = True

        logger.debug(
            "Subscription toggled",
            extra={"recipient": recipient, "pair_id": pair_id, "subscribed": subscribed},
        )
        return subscribed

    def clear(self, recipient: Recipient) -> None:
        """Drop all of a recipient's subscriptions. Unknown recipients are ignored."""
        pairs = self._subscribers.get(recipient)
        if pairs is None:
            return
        pairs.clear()
        logger.info(f"Subscriptions cleared for {recipient}")

    def subscriptions(self, recipient: Recipient) -> Tuple[str, ...]:
        """Copy of a recipient's subscribed pairs in subscription order."""
        if recipient not in self._subscribers:
            raise UnknownRecipient(recipient)
        return tuple(self._subscribers[recipient])

    def is_subscribed(self, recipient: Recipient, pair_id: str) -> bool:
        return pair_id in self._subscribers.get(recipient, {})

    def snapshot(self) -> Tuple[SubscriberView, ...]:
        """Immutable view of every subscriber, in first-contact order."""
        return tuple(
            SubscriberView(recipient=recipient, pairs=tuple(pairs))
            for recipient, pairs in self._subscribers.items()
        )

    def __len__(self) -> int:
        return len(self._subscribers)

    def __contains__(self, recipient: object) -> bool:
        return recipient in self._subscribers
