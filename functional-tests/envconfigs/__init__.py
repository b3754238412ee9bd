"""Environment configurations for functional tests."""

from envconfigs.electrum import ElectrumEnvConfig

__all__ = ["ElectrumEnvConfig"]
