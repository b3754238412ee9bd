"""
Launch an Electrum daemon and block until it is ready for use.

    electrumd = ElectrumD.new(exe_path())
    print(electrumd.call("version"))
    electrumd.stop()
"""

import contextlib
import logging
import os
import threading
from enum import Enum

from electrumd.config import Conf
from electrumd.discovery import port_strategy
from electrumd.errors import IoError
from electrumd.services.electrum import ElectrumService
from electrumd.workdir import WorkDir

logger = logging.getLogger(__name__)


class StartupState(str, Enum):
    Provisioning = "provisioning"
    Spawned = "spawned"
    AwaitingEndpoint = "awaiting_endpoint"
    AwaitingLiveness = "awaiting_liveness"
    Bootstrapping = "bootstrapping"
    Ready = "ready"

    def __str__(self) -> str:
        return self.value


def daemon_command(exe: str | os.PathLike, workdir: WorkDir, conf: Conf) -> list[str]:
    # Caller args go last so they can override ours.
    return [
        os.fspath(exe),
        "daemon",
        "--dir",
        str(workdir.path),
        f"--{conf.network}",
        *conf.args,
    ]


class ElectrumD(ElectrumService):
    """
    A running Electrum daemon with a loaded default wallet.

    Only `new()`/`with_conf()` hand out instances, and only once the daemon
    answers RPC and the wallet is loaded. If any startup step fails, the
    process is killed and the working directory removed before the error
    propagates.
    """

    @classmethod
    def new(cls, exe: str | os.PathLike) -> "ElectrumD":
        """Launch the daemon with the default `Conf`."""
        return cls.with_conf(exe, Conf())

    @classmethod
    def with_conf(
        cls,
        exe: str | os.PathLike,
        conf: Conf | None = None,
        cancel: threading.Event | None = None,
    ) -> "ElectrumD":
        """
        Launch the daemon from `exe` with the given `Conf`.

        Args:
            exe: Path to the Electrum executable
            conf: Launch configuration, defaults to `Conf()`
            cancel: Set from another thread to abort the startup waits

        Raises:
            IoError: If the working directory cannot be set up or `exe` cannot be spawned
            DaemonExitedError: If the daemon exits before it is ready
            RpcError: If creating or loading the default wallet fails
            StartupTimeoutError: If `conf.startup_timeout` elapses
            StartupCancelledError: If `cancel` is set
        """
        conf = conf or Conf()

        logger.debug(f"state: {StartupState.Provisioning}")
        workdir = WorkDir.create(conf)
        with contextlib.ExitStack() as cleanup:
            cleanup.callback(workdir.cleanup)

            workdir.prepare()
            strategy = port_strategy(conf.port_mode)
            strategy.prepare(workdir, conf)

            cmd = daemon_command(exe, workdir, conf)
            svc = cls(cmd, workdir, conf.view_stdout, name="electrumd")
            try:
                svc.start()
            except OSError as e:
                raise IoError(f"failed to launch {exe}: {e}") from e
            cleanup.callback(svc.close)
            logger.debug(f"state: {StartupState.Spawned} (pid {svc.proc.pid})")

            logger.debug(f"state: {StartupState.AwaitingEndpoint}")
            endpoint = strategy.discover(
                workdir, conf, cancel=cancel, ensure_running=svc.ensure_running
            )
            svc.bind(endpoint)

            logger.debug(f"state: {StartupState.AwaitingLiveness} ({svc.rpc_url()})")
            svc.wait_for_ready(
                timeout=conf.startup_timeout, interval=conf.poll_interval, cancel=cancel
            )

            logger.debug(f"state: {StartupState.Bootstrapping}")
            svc.bootstrap_wallet()

            cleanup.pop_all()

        logger.debug(f"state: {StartupState.Ready}")
        return svc
