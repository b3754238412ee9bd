"""Service factories for creating test services."""

from factories.electrum import ElectrumFactory

__all__ = ["ElectrumFactory"]
