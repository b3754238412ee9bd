"""Environment configurations."""

from typing import cast

import flexitest

from electrumd import PortMode
from electrumd.config import ServiceType
from factories.electrum import ElectrumFactory


class ElectrumEnvConfig(flexitest.EnvConfig):
    """
    Electrum environment: a single daemon with its default wallet loaded.
    """

    def __init__(self, port_mode: PortMode = PortMode.Fixed, args: list[str] | None = None):
        self.port_mode = port_mode
        self.args = args or []

    def init(self, ectx: flexitest.EnvContext) -> flexitest.LiveEnv:
        electrum_factory = cast(ElectrumFactory, ectx.get_factory(ServiceType.Electrum))

        electrumd = electrum_factory.create_daemon(port_mode=self.port_mode, args=self.args)

        services = {
            ServiceType.Electrum: electrumd,
        }

        return flexitest.LiveEnv(services)
