"""
Per-instance working directory, ports and credentials.

Nothing here spawns a process; the whole directory is disposable, so a
failure halfway through leaves nothing a fresh `WorkDir` would trip over.
"""

import logging
import os
import secrets
import socket
import string
import tempfile
from collections.abc import Mapping
from pathlib import Path

from electrumd.config import Conf, ElectrumConfig
from electrumd.config.constants import (
    CONFIG_FILE_NAME,
    DAEMON_FILE_NAME,
    DEFAULT_WALLET_NAME,
    LOCAL_IP,
    TEMPDIR_ROOT_ENV,
    WALLETS_DIR_NAME,
)
from electrumd.errors import IoError

logger = logging.getLogger(__name__)


def resolve_tmpdir_root(
    override: str | Path | None,
    environ: Mapping[str, str] = os.environ,
) -> str | None:
    """
    Where to create working directories: explicit override, then the
    `TEMPDIR_ROOT` env var, then None (the OS default temp dir).
    """
    if override is not None:
        return str(override)
    env_path = environ.get(TEMPDIR_ROOT_ENV)
    if env_path:
        return env_path
    return None


def get_available_port() -> int:
    """
    Returns a currently unused local port.

    Port 0 lets the OS pick. The listener is closed before returning, so
    another process may grab the port before the daemon binds it.
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind((LOCAL_IP, 0))
            return s.getsockname()[1]
    except OSError as e:
        raise IoError(f"failed to probe for a free port: {e}") from e


def rand_string(length: int = 15) -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


class WorkDir:
    """
    Exclusively owned temp directory holding all state of one daemon.

    Layout:
        <path>/<network>/config
        <path>/<network>/daemon
        <path>/<network>/wallets/<wallet_name>
    """

    def __init__(
        self,
        network: str,
        root: str | None = None,
        wallet_name: str = DEFAULT_WALLET_NAME,
    ):
        try:
            self._tmp = tempfile.TemporaryDirectory(prefix="electrumd-", dir=root)
        except OSError as e:
            raise IoError(f"failed to create working directory under {root}: {e}") from e
        self.path = Path(self._tmp.name)
        self.network = network
        self.wallet_name = wallet_name
        logger.debug(f"work_dir: {self.path}")

    @classmethod
    def create(cls, conf: Conf) -> "WorkDir":
        return cls(conf.network, resolve_tmpdir_root(conf.tmpdir), conf.wallet_name)

    @property
    def network_dir(self) -> Path:
        return self.path / self.network

    @property
    def config_path(self) -> Path:
        return self.network_dir / CONFIG_FILE_NAME

    @property
    def daemon_file(self) -> Path:
        return self.network_dir / DAEMON_FILE_NAME

    @property
    def wallet_path(self) -> Path:
        return self.network_dir / WALLETS_DIR_NAME / self.wallet_name

    def exists(self) -> bool:
        return self.path.is_dir()

    def prepare(self) -> None:
        """Create every directory the daemon expects before anything is written."""
        try:
            for d in (self.network_dir, self.wallet_path.parent, self.config_path.parent):
                d.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IoError(f"failed to lay out {self.path}: {e}") from e

    def write_config(self, config: ElectrumConfig) -> None:
        try:
            with open(self.config_path, "w") as f:
                f.write(config.as_json_string())
        except OSError as e:
            raise IoError(f"failed to write {self.config_path}: {e}") from e

    def read_config(self) -> ElectrumConfig:
        return ElectrumConfig.from_json_file(self.config_path)

    def cleanup(self) -> None:
        """Recursively remove the directory; safe to call more than once."""
        self._tmp.cleanup()

    def __enter__(self) -> "WorkDir":
        return self

    def __exit__(self, *exc) -> None:
        self.cleanup()

    def __repr__(self) -> str:
        return f"WorkDir({str(self.path)!r})"
