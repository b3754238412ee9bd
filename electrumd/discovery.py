"""
Endpoint discovery: how the harness learns where the daemon's RPC listens.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from electrumd.config import Conf, ElectrumConfig, PortMode
from electrumd.config.constants import STATUS_PORT_DELIMITER, STATUS_PORT_OFFSET
from electrumd.errors import JsonError, StatusFormatError
from electrumd.wait import wait_until_with_value
from electrumd.workdir import WorkDir, get_available_port, rand_string

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Endpoint:
    port: int
    rpc_user: str
    rpc_password: str


def extract_port(
    text: str,
    offset: int = STATUS_PORT_OFFSET,
    delimiter: str = STATUS_PORT_DELIMITER,
) -> int:
    """
    Read the integer that starts at character `offset` of `text` and runs up
    to the first `delimiter`.

    This is the only place that knows the daemon file layout, e.g.
    `(('127.0.0.1', 40123), 1700000000.0)` -> 40123.
    """
    end = text.find(delimiter, offset)
    if end < 0:
        raise StatusFormatError(f"no {delimiter!r} after offset {offset} in {text!r}")
    digits = text[offset:end]
    if not digits.isdigit():
        raise StatusFormatError(f"expected a port at offset {offset}, got {digits!r}")
    port = int(digits)
    if not 0 < port < 65536:
        raise StatusFormatError(f"port out of range: {port}")
    return port


class FixedPortStrategy:
    """
    Probe a free port and generate credentials before spawning, and write them
    into the daemon config.
    """

    def __init__(self):
        self._endpoint: Endpoint | None = None

    def prepare(self, workdir: WorkDir, conf: Conf) -> None:
        endpoint = Endpoint(
            port=get_available_port(),
            rpc_user=conf.rpc_user,
            rpc_password=rand_string(),
        )
        workdir.write_config(
            ElectrumConfig(
                rpcport=endpoint.port,
                rpcuser=endpoint.rpc_user,
                rpcpassword=endpoint.rpc_password,
                log_to_file=True,
            )
        )
        self._endpoint = endpoint

    def discover(
        self,
        workdir: WorkDir,
        conf: Conf,
        cancel: threading.Event | None = None,
        ensure_running: Callable[[], None] = lambda: None,
    ) -> Endpoint:
        if self._endpoint is None:
            raise RuntimeError("prepare() must run before discover()")
        return self._endpoint


class SelfAssignedPortStrategy:
    """
    Let the daemon pick its port and credentials, then read them back: the port
    from the daemon file, the credentials from the rewritten config.
    """

    def prepare(self, workdir: WorkDir, conf: Conf) -> None:
        workdir.write_config(ElectrumConfig(log_to_file=True))

    def _read_endpoint(self, workdir: WorkDir) -> Endpoint | None:
        if not workdir.daemon_file.exists():
            return None
        port = extract_port(workdir.daemon_file.read_text())

        config = workdir.read_config()
        if not config.has_credentials():
            return None
        return Endpoint(port=port, rpc_user=config.rpcuser, rpc_password=config.rpcpassword)

    def discover(
        self,
        workdir: WorkDir,
        conf: Conf,
        cancel: threading.Event | None = None,
        ensure_running: Callable[[], None] = lambda: None,
    ) -> Endpoint:
        def poll() -> Endpoint | None:
            ensure_running()
            return self._read_endpoint(workdir)

        endpoint = wait_until_with_value(
            poll,
            lambda e: e is not None,
            error_with=f"daemon never announced its port in {workdir.daemon_file}",
            timeout=conf.startup_timeout,
            step=conf.poll_interval,
            cancel=cancel,
            # The daemon may still be writing either file.
            ignore=(StatusFormatError, JsonError),
        )
        logger.debug(f"daemon announced port {endpoint.port}")
        return endpoint


PortStrategy = FixedPortStrategy | SelfAssignedPortStrategy


def port_strategy(mode: PortMode) -> PortStrategy:
    if mode == PortMode.Fixed:
        return FixedPortStrategy()
    if mode == PortMode.SelfAssigned:
        return SelfAssignedPortStrategy()
    raise ValueError(f"unknown port mode {mode!r}")
