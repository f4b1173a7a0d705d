"""In-memory collaborators for tests and dry runs."""

from .fakes import FakePriceSource, MemoryNotifier

__all__ = ["FakePriceSource", "MemoryNotifier"]
