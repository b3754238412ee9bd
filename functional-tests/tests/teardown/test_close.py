"""Test implicit teardown."""

import logging

import flexitest

from common.base_test import ElectrumTest

logger = logging.getLogger(__name__)


@flexitest.register
class TestClose(ElectrumTest):
    """Closing the handle kills the daemon and removes its working directory."""

    def __init__(self, ctx: flexitest.InitContext):
        ctx.set_env("basic")

    def main(self, ctx):
        electrumd = self.launch()
        proc = electrumd.proc
        workdir = electrumd.workdir.path
        assert workdir.is_dir()

        electrumd.close()

        assert proc.poll() is not None, "daemon still running after close()"
        assert not workdir.exists(), f"{workdir} left behind"
        return True
