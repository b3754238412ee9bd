"""
Electrum daemon service: the runtime side of a launched daemon.
"""

import contextlib
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypedDict

from electrumd.config.constants import (
    LOCAL_IP,
    RPC_TIMEOUT,
    TEARDOWN_RPC_TIMEOUT,
    TEARDOWN_WAIT_TIMEOUT,
)
from electrumd.discovery import Endpoint
from electrumd.errors import Error, JsonError, RpcTransportError
from electrumd.rpc import JsonRpcClient, Params
from electrumd.services.base import RpcService
from electrumd.workdir import WorkDir


class ElectrumProps(TypedDict, total=False):
    """Properties for Electrum service."""

    datadir: str
    network: str
    wallet_path: str
    rpc_host: str
    rpc_port: int
    rpc_user: str
    rpc_password: str
    rpc_url: str


@dataclass(frozen=True)
class ConnectParams:
    """Everything needed to reach a running daemon."""

    datadir: Path
    rpc_host: str
    rpc_port: int

    @property
    def rpc_socket(self) -> tuple[str, int]:
        return (self.rpc_host, self.rpc_port)

    @property
    def rpc_url(self) -> str:
        return f"http://{self.rpc_host}:{self.rpc_port}"


class ElectrumService(RpcService):
    """
    RpcService for the Electrum daemon with health check via `version`.

    Owns the child process, the working directory and the RPC client. The
    working directory is removed only after the process has been killed.
    """

    props: ElectrumProps

    def __init__(
        self,
        cmd: list[str],
        workdir: WorkDir,
        view_stdout: bool = False,
        name: str | None = None,
    ):
        props: ElectrumProps = {
            "datadir": str(workdir.path),
            "network": workdir.network,
            "wallet_path": str(workdir.wallet_path),
        }
        super().__init__(dict(props), cmd, view_stdout, name)
        self.workdir = workdir
        self.params: ConnectParams | None = None
        self.client: JsonRpcClient | None = None
        self._auth: tuple[str, str] | None = None

    @property
    def wallet_path(self) -> Path:
        return self.workdir.wallet_path

    def bind(self, endpoint: Endpoint) -> None:
        """Point the service at the endpoint the daemon listens on."""
        self.params = ConnectParams(
            datadir=self.workdir.path,
            rpc_host=LOCAL_IP,
            rpc_port=endpoint.port,
        )
        self._auth = (endpoint.rpc_user, endpoint.rpc_password)
        self.props.update(
            rpc_host=LOCAL_IP,
            rpc_port=endpoint.port,
            rpc_user=endpoint.rpc_user,
            rpc_password=endpoint.rpc_password,
            rpc_url=self.params.rpc_url,
        )
        self.client = self.create_rpc()

    def create_rpc(self, timeout: float = RPC_TIMEOUT) -> JsonRpcClient:
        if self.params is None:
            raise RuntimeError(f"service '{self._name}' has no RPC endpoint yet")

        rpc = JsonRpcClient(self.params.rpc_url, auth=self._auth, name=self._name, timeout=timeout)

        def _status_check(method: str):
            if not self.check_status():
                self._logger.warning(f"service '{self._name}' crashed before call to {method}")
                self.ensure_running()

        rpc.set_pre_call_hook(_status_check)

        return rpc

    def _rpc_health_check(self, rpc: JsonRpcClient) -> None:
        """Check Electrum health by calling version."""
        # A piped stderr could fill up unread; the daemon must inherit ours.
        assert self.proc is not None and self.proc.stderr is None
        rpc.version()

    def _not_ready_errors(self) -> tuple[type[Exception], ...]:
        """
        No connection, no answer in time, or a garbled reply from a daemon that
        is still coming up. An `RpcError` is a well-formed answer from a live
        daemon refusing `version`, so it surfaces instead of being retried.
        """
        return (RpcTransportError, JsonError)

    def call(self, method: str, params: Params | None = None) -> Any:
        """
        Call the RPC method with the given params, once.

        Usage:
            electrumd.call("version")
            electrumd.call("load_wallet", {"wallet_path": path})
        """
        if self.client is None:
            raise RuntimeError(f"service '{self._name}' has no RPC endpoint yet")
        return self.client.call(method, params)

    def rpc_url(self) -> str:
        """The RPC URL including the scheme, e.g. http://127.0.0.1:44842"""
        if self.params is None:
            raise RuntimeError(f"service '{self._name}' has no RPC endpoint yet")
        return self.params.rpc_url

    def bootstrap_wallet(self) -> None:
        """Create the default wallet and make it the loaded one."""
        self.call("create")
        self.call("load_wallet", {"wallet_path": str(self.wallet_path)})

    def stop(self) -> int:
        """
        Ask the daemon to stop and wait for it to exit.

        If the stop call fails the error propagates and the process is left
        running; `kill()` is the fallback. Stopping an already exited process
        just returns its exit code.

        Returns:
            The process exit code
        """
        if self.proc is None:
            raise RuntimeError(f"service '{self._name}' not started")
        if self.proc.poll() is not None:
            return self.proc.returncode

        self.call("stop")
        returncode = self.proc.wait()
        self._logger.debug(f"process exited with code {returncode}")
        return returncode

    def kill(self) -> None:
        """
        Best-effort graceful stop, then SIGKILL regardless. Never waits for the
        process to exit and never raises.

        A daemon that never passed a health check is not asked to stop, since
        it may hold the connection open until the RPC timeout.
        """
        if self.proc is None or self.proc.poll() is not None:
            return
        if self.params is not None and self.ready:
            with contextlib.suppress(Error):
                self.create_rpc(timeout=TEARDOWN_RPC_TIMEOUT).call("stop")
        with contextlib.suppress(OSError):
            self.proc.kill()

    def close(self) -> None:
        """Kill the process, then remove the working directory."""
        self.kill()
        # SIGKILL cannot be ignored; the short wait only keeps the daemon from
        # writing into a directory that is being removed.
        if self.proc is not None:
            with contextlib.suppress(subprocess.TimeoutExpired):
                self.proc.wait(TEARDOWN_WAIT_TIMEOUT)
        self.workdir.cleanup()

    def __enter__(self) -> "ElectrumService":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __del__(self):
        # May run on a half-initialized instance during interpreter shutdown.
        if "workdir" in self.__dict__:
            with contextlib.suppress(Exception):
                self.close()
