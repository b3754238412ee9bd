import stat
import sys
from pathlib import Path

import pytest

from electrumd import Conf
from electrumd.config.constants import DOWNLOAD_DIR_ENV, EXE_ENV, TEMPDIR_ROOT_ENV, VERSION_ENV

FAKE_ELECTRUM = Path(__file__).with_name("fake_electrum.py")

# Keeps a broken test from hanging the suite on an unbounded wait.
STARTUP_TIMEOUT = 15


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for var in (TEMPDIR_ROOT_ENV, EXE_ENV, VERSION_ENV, DOWNLOAD_DIR_ENV):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(scope="session")
def fake_exe(tmp_path_factory: pytest.TempPathFactory) -> str:
    """A single executable path that runs the fake daemon with this interpreter."""
    path = tmp_path_factory.mktemp("bin") / "electrum"
    path.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{FAKE_ELECTRUM}" "$@"\n')
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


@pytest.fixture
def tmp_root(tmp_path: Path) -> Path:
    """Parent directory for working directories, so tests can check for leaks."""
    root = tmp_path / "root"
    root.mkdir()
    return root


@pytest.fixture
def make_conf(tmp_root: Path):
    def _make(**kwargs) -> Conf:
        kwargs.setdefault("tmpdir", tmp_root)
        kwargs.setdefault("startup_timeout", STARTUP_TIMEOUT)
        kwargs.setdefault("poll_interval", 0.05)
        return Conf(**kwargs)

    return _make

