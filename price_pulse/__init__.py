"""Price Pulse: periodic price digests for chat subscribers."""

__version__ = "0.1.0"
