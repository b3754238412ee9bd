"""
Constants shared across the harness.
"""

from enum import Enum

LOCAL_IP = "127.0.0.1"

DEFAULT_NETWORK = "regtest"
DEFAULT_RPC_USER = "electrumd"
DEFAULT_WALLET_NAME = "default_wallet"
DEFAULT_POLL_INTERVAL = 0.25

# Env var overrides
TEMPDIR_ROOT_ENV = "TEMPDIR_ROOT"
EXE_ENV = "ELECTRUMD_EXE"
VERSION_ENV = "ELECTRUMD_VERSION"
DOWNLOAD_DIR_ENV = "ELECTRUMD_DOWNLOAD_DIR"

# On-disk layout the daemon honors under `<workdir>/<network>`
CONFIG_FILE_NAME = "config"
DAEMON_FILE_NAME = "daemon"
WALLETS_DIR_NAME = "wallets"

# The daemon file reads like `(('127.0.0.1', 40123), 1700000000.0)`
STATUS_PORT_OFFSET = len("(('127.0.0.1', ")
STATUS_PORT_DELIMITER = ")"

TEARDOWN_RPC_TIMEOUT = 5
TEARDOWN_WAIT_TIMEOUT = 5


class ServiceType(str, Enum):
    """
    Service type identifiers for flexitest environments.

    Usage:
        services = {ServiceType.Electrum: electrumd}
        electrumd = self.get_service(ServiceType.Electrum)
    """

    Electrum = "electrum"

    def __str__(self) -> str:
        """Allow direct use in f-strings and format operations."""
        return self.value


class PortMode(str, Enum):
    """
    How the harness learns the daemon's RPC endpoint.

    Fixed: the harness probes a free port and writes it, with generated
    credentials, into the config file before spawning.
    SelfAssigned: the daemon picks its own port and credentials, announces the
    port in the daemon file and writes the credentials back to the config file.
    """

    Fixed = "fixed"
    SelfAssigned = "self_assigned"

    def __str__(self) -> str:
        return self.value

RPC_TIMEOUT = 30
# Per-request bound on liveness checks; a slower answer counts as "not ready".
HEALTH_CHECK_RPC_TIMEOUT = 5
# requests rejects a zero timeout
MIN_RPC_TIMEOUT = 0.05
