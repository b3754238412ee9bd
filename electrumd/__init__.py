"""
Run a headless Electrum wallet daemon for integration tests.

    from electrumd import ElectrumD, exe_path

    with ElectrumD.new(exe_path()) as electrumd:
        print(electrumd.call("version"))
"""

from .config import Conf, ElectrumConfig, PortMode
from .daemon import ElectrumD
from .discovery import Endpoint, extract_port
from .errors import (
    BothFeatureAndEnvVarError,
    DaemonExitedError,
    Error,
    IoError,
    JsonError,
    NeitherFeatureNorEnvVarError,
    NoEnvVarError,
    NoFeatureError,
    RpcError,
    RpcTransportError,
    StartupCancelledError,
    StartupTimeoutError,
    StatusFormatError,
    UnsupportedVersionError,
)
from .exe import downloaded_exe_path, exe_path
from .rpc import JsonRpcClient
from .services import ConnectParams
from .workdir import WorkDir, get_available_port, resolve_tmpdir_root

__all__ = [
    "ElectrumD",
    "Conf",
    "ElectrumConfig",
    "PortMode",
    "ConnectParams",
    "Endpoint",
    "WorkDir",
    "JsonRpcClient",
    "exe_path",
    "downloaded_exe_path",
    "get_available_port",
    "resolve_tmpdir_root",
    "extract_port",
    "Error",
    "IoError",
    "DaemonExitedError",
    "RpcError",
    "RpcTransportError",
    "JsonError",
    "StatusFormatError",
    "StartupTimeoutError",
    "StartupCancelledError",
    "NoFeatureError",
    "UnsupportedVersionError",
    "NoEnvVarError",
    "NeitherFeatureNorEnvVarError",
    "BothFeatureAndEnvVarError",
]
