"""
Error taxonomy for the subscription and broadcast core.

Registry misuse errors surface to the command-handling layer. Fetch and
delivery failures are contained at the granularity of one pair or one
subscriber and never abort a tick.
"""
from typing import Union

Recipient = Union[int, str]


class PricePulseError(Exception):
    """Base class for all Price Pulse errors."""


class UnknownRecipient(PricePulseError):
    """Raised when a registry operation targets a recipient never ensured."""

    def __init__(self, recipient: Recipient):
        self.recipient = recipient
        super().__init__(f"Unknown recipient: {recipient}")


class UnknownPair(PricePulseError):
    """Raised when a pair id is not in the tracked pair table."""

    def __init__(self, pair_id: str):
        self.pair_id = pair_id
        super().__init__(f"Unknown pair: {pair_id}")


class FetchFailure(PricePulseError):
    """Price source could not produce a quote for one pair."""

    def __init__(self, pair_id: str, reason: str = ""):
        self.pair_id = pair_id
        self.reason = reason
        message = f"Failed to fetch price for {pair_id}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class DeliveryFailure(PricePulseError):
    """Notifier could not deliver a message to one recipient."""

    def __init__(self, recipient: Recipient, reason: str = ""):
        self.recipient = recipient
        self.reason = reason
        message = f"Failed to deliver message to {recipient}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
