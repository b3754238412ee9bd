"""
Process-backed service extending flexitest.service.ProcService with RPC health checks.
"""

import logging
import subprocess
import threading
from typing import Any

import flexitest

from electrumd.config.constants import HEALTH_CHECK_RPC_TIMEOUT, MIN_RPC_TIMEOUT, RPC_TIMEOUT
from electrumd.errors import DaemonExitedError
from electrumd.wait import deadline_after, time_left, wait_until


class RpcService(flexitest.service.ProcService):
    """
    Extends ProcService with RPC capabilities and standardized methods for test services.

    Subclasses must implement create_rpc(timeout) and _rpc_health_check().

    The process is spawned here rather than by ProcService: stdout goes either
    to the null device or to the parent's stdout, and is never piped, so an
    unread pipe can never block the daemon. stderr is inherited.

    Usage:
        class MyService(RpcService):
            def _rpc_health_check(self, rpc):
                rpc.ping()

            def create_rpc(self, timeout: float = RPC_TIMEOUT) -> JsonRpcClient:
                return JsonRpcClient(self.props["rpc_url"], timeout=timeout)

        svc = MyService(props, cmd=["myservice", "--flag"], name="myservice")
        svc.start()
        svc.wait_for_ready()
    """

    def __init__(
        self,
        props: dict[str, Any],
        cmd: list[str],
        view_stdout: bool = False,
        name: str | None = None,
    ):
        """
        Initialize service wrapper.

        Args:
            props: Service properties (ports, URLs, etc.)
            cmd: Command and arguments to execute
            view_stdout: Inherit the parent's stdout instead of discarding it
            name: Service name for logging
        """
        super().__init__(props, cmd, None)
        self.cmd = cmd
        self.view_stdout = view_stdout
        self.proc: subprocess.Popen | None = None
        # Set once a health check has passed
        self.ready = False
        self._name = name or cmd[0]
        self._logger = logging.getLogger(f"service.{self._name}")

    def start(self) -> None:
        """
        Spawn the process.

        Raises:
            RuntimeError: If the process was already started
            OSError: If the executable cannot be spawned
        """
        if self.proc is not None:
            raise RuntimeError(f"service '{self._name}' already started")

        stdout = None if self.view_stdout else subprocess.DEVNULL
        self._logger.debug(f"launching {self.cmd}")
        self.proc = subprocess.Popen(self.cmd, stdout=stdout)
        self._logger.debug(f"launched process {self.proc.pid}")

    def check_status(self) -> bool:
        """True while the spawned process is running."""
        return self.proc is not None and self.proc.poll() is None

    def ensure_running(self) -> None:
        """
        Raises:
            DaemonExitedError: If the process has exited (or never started)
        """
        if not self.check_status():
            returncode = self.proc.returncode if self.proc is not None else None
            raise DaemonExitedError(self._name, returncode)

    def create_rpc(self, timeout: float = RPC_TIMEOUT):
        """
        Create RPC client for this service, with `timeout` bounding each request.

        Raises:
            NotImplementedError: If subclass doesn't implement this method
        """
        raise NotImplementedError("Subclass must implement create_rpc()")

    def _rpc_health_check(self, rpc: Any) -> None:
        """
        Perform RPC call to verify service health.

        Subclasses override this to call a simple RPC method that proves the
        service is responsive, raising if it is not.
        """
        raise NotImplementedError("Subclass must implement _rpc_health_check()")

    def _not_ready_errors(self) -> tuple[type[Exception], ...]:
        """Exceptions from the health check that mean "not ready yet" rather than failure."""
        return ()

    def check_health(self, rpc_timeout: float | None = None) -> bool:
        """
        Check if service is healthy and ready to accept requests.

        Args:
            rpc_timeout: Bound on the health check request, None for the client default

        Raises:
            DaemonExitedError: If the process is gone, it will never become healthy
        """
        self.ensure_running()

        rpc = self.create_rpc() if rpc_timeout is None else self.create_rpc(timeout=rpc_timeout)
        try:
            self._rpc_health_check(rpc)
            return True
        except self._not_ready_errors():
            return False

    def wait_for_ready(
        self,
        timeout: float | None = None,
        interval: float = 0.25,
        cancel: threading.Event | None = None,
    ) -> None:
        """
        Wait until service is healthy and ready.

        Each health check request is bounded by whatever is left of `timeout`,
        and by `HEALTH_CHECK_RPC_TIMEOUT`, so a daemon that accepts connections
        but never answers cannot hold the wait past its deadline or hide `cancel`.

        Args:
            timeout: Maximum time to wait in seconds, None to wait forever
            interval: Time between health checks in seconds
            cancel: Set from another thread to abort the wait

        Raises:
            StartupTimeoutError: If the service isn't ready within timeout
            StartupCancelledError: If `cancel` was set
            DaemonExitedError: If the process exits while waiting
        """
        deadline = deadline_after(timeout)

        def check() -> bool:
            rpc_timeout = HEALTH_CHECK_RPC_TIMEOUT
            remaining = time_left(deadline)
            if remaining is not None:
                rpc_timeout = max(min(rpc_timeout, remaining), MIN_RPC_TIMEOUT)
            return self.check_health(rpc_timeout)

        wait_until(
            check,
            error_with=f"Service '{self._name}' not ready",
            timeout=timeout,
            step=interval,
            cancel=cancel,
        )
        self.ready = True
