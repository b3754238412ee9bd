import os
from typing import cast

import flexitest

from electrumd import ElectrumD


class ElectrumRunContext(flexitest.RunContext):
    """A wrapper to flexitest's runcontext that knows the test name and where its data goes."""

    def __init__(self, datadir_root: str, name: str, env: flexitest.LiveEnv):
        super().__init__(env)
        self.name = name
        self.datadir_root = datadir_root

    @property
    def test_dir(self) -> str:
        """Per-test directory under the datadir root, created on first use."""
        path = os.path.join(self.datadir_root, f"_{self.name}")
        os.makedirs(path, exist_ok=True)
        return path

    def get_service(self, name: str):
        svc = super().get_service(name)
        if svc is not None:
            return cast(ElectrumD, svc)
        return None
