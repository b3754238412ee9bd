"""
Configuration dataclasses for the daemon.
"""

import json
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

from electrumd.config.constants import (
    DEFAULT_NETWORK,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_RPC_USER,
    DEFAULT_WALLET_NAME,
    PortMode,
)
from electrumd.errors import IoError, JsonError


@dataclass(frozen=True)
class Conf:
    """
    How to launch one daemon instance.

    Start from the defaults and override what you need:

        conf = Conf(args=["--offline"], view_stdout=True)
        electrumd = ElectrumD.with_conf(exe, conf)

    `network` must match the network flag passed to the daemon, since the
    daemon keeps its config, wallets and status file in `<workdir>/<network>`.

    `tmpdir` optionally sets where working directories are created. When it is
    unset the `TEMPDIR_ROOT` env var is used, and when that is unset too the OS
    default temp dir. Pointing it at a ramdisk makes wallets spawn faster.

    `startup_timeout` bounds each startup wait; `None` waits until the daemon
    answers or the caller's own timeout kills the test.
    """

    args: tuple[str, ...] = field(default=())
    view_stdout: bool = field(default=False)
    network: str = field(default=DEFAULT_NETWORK)
    tmpdir: Path | None = field(default=None)
    port_mode: PortMode = field(default=PortMode.Fixed)
    rpc_user: str = field(default=DEFAULT_RPC_USER)
    wallet_name: str = field(default=DEFAULT_WALLET_NAME)
    poll_interval: float = field(default=DEFAULT_POLL_INTERVAL)
    startup_timeout: float | None = field(default=None)

    def __post_init__(self):
        # Accept lists at call sites, store a tuple so the conf stays immutable.
        object.__setattr__(self, "args", tuple(self.args))
        if self.tmpdir is not None:
            object.__setattr__(self, "tmpdir", Path(self.tmpdir))
        object.__setattr__(self, "port_mode", PortMode(self.port_mode))

        for arg in self.args:
            if not arg or any(c.isspace() for c in arg):
                raise ValueError(
                    f"daemon args must be non-empty and contain no whitespace, got {arg!r}"
                )
        if (
            not self.network
            or os.sep in self.network
            or any(c.isspace() for c in self.network)
        ):
            raise ValueError(f"invalid network name {self.network!r}")
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.startup_timeout is not None and self.startup_timeout <= 0:
            raise ValueError(f"startup_timeout must be positive, got {self.startup_timeout}")


@dataclass
class ElectrumConfig:
    """
    The daemon's own config file, a flat JSON map.

    In fixed-port mode the harness fills in the RPC fields; in self-assigned
    mode it writes only `log_to_file` and reads the credentials back once the
    daemon has rewritten the file.
    """

    rpcport: int | None = field(default=None)
    rpcuser: str | None = field(default=None)
    rpcpassword: str | None = field(default=None)
    log_to_file: bool = field(default=True)

    def as_json_string(self) -> str:
        d = asdict(self)
        # Remove None values (left for the daemon to fill in)
        d = {k: v for k, v in d.items() if v is not None}
        return json.dumps(d)

    def has_credentials(self) -> bool:
        return bool(self.rpcuser) and bool(self.rpcpassword)

    @classmethod
    def from_json_string(cls, text: str) -> "ElectrumConfig":
        try:
            d = json.loads(text)
        except json.JSONDecodeError as e:
            raise JsonError(f"invalid daemon config: {e}") from e
        if not isinstance(d, dict):
            raise JsonError(f"daemon config must be a JSON object, got {type(d).__name__}")

        # The daemon writes plenty of keys of its own, keep only ours.
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in d.items() if k in known})

    @classmethod
    def from_json_file(cls, path: str | Path) -> "ElectrumConfig":
        try:
            with open(path) as f:
                text = f.read()
        except OSError as e:
            raise IoError(f"failed to read daemon config {path}: {e}") from e
        return cls.from_json_string(text)
