"""
Configuration dataclasses and constants.
"""

from electrumd.config.config import Conf, ElectrumConfig
from electrumd.config.constants import PortMode, ServiceType

__all__ = [
    # config.py
    "Conf",
    "ElectrumConfig",
    # constants.py
    "PortMode",
    "ServiceType",
]
