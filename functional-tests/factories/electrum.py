"""
Electrum daemon factory.
Creates headless Electrum wallets for testing.
"""

import flexitest

from electrumd import Conf, ElectrumD, PortMode
from electrumd.config import ServiceType


class ElectrumFactory(flexitest.Factory):
    """
    Factory for creating Electrum daemons.

    Ports are probed by electrumd itself, so the factory hands out none.

    Usage:
        factory = ElectrumFactory(exe_path())
        electrumd = factory.create_daemon()
        electrumd.call("version")
    """

    def __init__(self, exe: str):
        super().__init__([])
        self.exe = exe

    @flexitest.with_ectx("ctx")
    def create_daemon(
        self,
        port_mode: PortMode = PortMode.Fixed,
        args: list[str] | None = None,
        view_stdout: bool = False,
        **kwargs,
    ) -> ElectrumD:
        """
        Create an Electrum daemon with a loaded default wallet.

        Returns:
            Running daemon, RPC ready
        """
        # The `with_ectx` ensures this is available.
        ctx: flexitest.EnvContext = kwargs["ctx"]

        datadir = ctx.make_service_dir(f"{ServiceType.Electrum}_{port_mode}")
        conf = Conf(
            args=args or [],
            view_stdout=view_stdout,
            tmpdir=datadir,
            port_mode=port_mode,
        )

        try:
            return ElectrumD.with_conf(self.exe, conf)
        except Exception as e:
            raise RuntimeError(f"Failed to start electrum service ({port_mode}): {e}") from e
