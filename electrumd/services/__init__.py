"""
Service wrappers for the harness.
"""

from electrumd.services.base import RpcService
from electrumd.services.electrum import ConnectParams, ElectrumProps, ElectrumService

__all__ = [
    "RpcService",
    "ElectrumService",
    "ElectrumProps",
    "ConnectParams",
]
