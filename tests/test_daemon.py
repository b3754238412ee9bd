import gc
import json
import threading
import time
from pathlib import Path

import pytest

from electrumd import (
    DaemonExitedError,
    ElectrumD,
    IoError,
    PortMode,
    RpcError,
    RpcTransportError,
    StartupCancelledError,
    StartupTimeoutError,
)
from electrumd.daemon import daemon_command
from electrumd.workdir import WorkDir

# ============================================================================
# Startup
# ============================================================================


def test_command_line(tmp_root: Path, make_conf):
    conf = make_conf(network="testnet", args=["--offline", "-v"])
    with WorkDir.create(conf) as workdir:
        assert daemon_command(Path("/opt/electrum"), workdir, conf) == [
            "/opt/electrum",
            "daemon",
            "--dir",
            str(workdir.path),
            "--testnet",
            "--offline",
            "-v",
        ]


def test_startup_and_stop(fake_exe: str, tmp_root: Path, make_conf):
    electrumd = ElectrumD.with_conf(fake_exe, make_conf())

    assert electrumd.call("version") == "4.1.5"
    assert electrumd.check_status()
    assert electrumd.workdir.exists()
    assert electrumd.workdir.path.parent == tmp_root

    params = electrumd.params
    assert params.datadir == electrumd.workdir.path
    assert params.rpc_socket == ("127.0.0.1", params.rpc_port)
    assert electrumd.rpc_url() == f"http://127.0.0.1:{params.rpc_port}"

    assert electrumd.stop() == 0
    assert not electrumd.check_status()
    # A second stop doesn't need the RPC anymore
    assert electrumd.stop() == 0

    electrumd.close()
    assert list(tmp_root.iterdir()) == []


def test_new_uses_defaults(fake_exe: str, tmp_root: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("TEMPDIR_ROOT", str(tmp_root))
    with ElectrumD.new(fake_exe) as electrumd:
        assert electrumd.call("version") == "4.1.5"
        assert electrumd.props["network"] == "regtest"
    assert list(tmp_root.iterdir()) == []


def test_default_wallet_is_loaded(fake_exe: str, make_conf):
    with ElectrumD.with_conf(fake_exe, make_conf()) as electrumd:
        wallets = electrumd.call("list_wallets")
        assert wallets == [{"path": str(electrumd.wallet_path), "synchronized": True}]
        assert electrumd.wallet_path.exists()


def test_config_file_matches_endpoint(fake_exe: str, make_conf):
    with ElectrumD.with_conf(fake_exe, make_conf(rpc_user="alice")) as electrumd:
        config = json.loads(electrumd.workdir.config_path.read_text())
        assert config["rpcport"] == electrumd.params.rpc_port
        assert config["rpcuser"] == "alice"
        assert config["log_to_file"] is True
        assert electrumd.props["rpc_password"] == config["rpcpassword"]


def test_slow_daemon_is_polled(fake_exe: str, make_conf):
    conf = make_conf(args=["--startup-delay=1"])
    with ElectrumD.with_conf(fake_exe, conf) as electrumd:
        assert electrumd.call("version") == "4.1.5"


def test_garbled_version_reply_is_retried(fake_exe: str, make_conf):
    conf = make_conf(args=["--garble-version=3"])
    with ElectrumD.with_conf(fake_exe, conf) as electrumd:
        assert electrumd.call("version") == "4.1.5"


def test_view_stdout(fake_exe: str, make_conf):
    with ElectrumD.with_conf(fake_exe, make_conf(view_stdout=True)) as electrumd:
        assert electrumd.proc.stdout is None
        assert electrumd.call("version") == "4.1.5"
        assert electrumd.stop() == 0


def test_self_assigned_port(fake_exe: str, make_conf):
    conf = make_conf(port_mode=PortMode.SelfAssigned, args=["--announce-delay=0.5"])
    with ElectrumD.with_conf(fake_exe, conf) as electrumd:
        assert electrumd.call("version") == "4.1.5"
        assert electrumd.props["rpc_user"] == "user"
        assert electrumd.workdir.daemon_file.exists()
        assert electrumd.stop() == 0


def test_rpc_errors_surface(fake_exe: str, make_conf):
    with ElectrumD.with_conf(fake_exe, make_conf()) as electrumd:
        with pytest.raises(RpcError) as exc_info:
            electrumd.call("no_such_method")
        assert exc_info.value.code == -32601


def test_multiple_instances_are_isolated(fake_exe: str, make_conf):
    with (
        ElectrumD.with_conf(fake_exe, make_conf()) as a,
        ElectrumD.with_conf(fake_exe, make_conf()) as b,
    ):
        assert a.params.rpc_port != b.params.rpc_port
        assert a.workdir.path != b.workdir.path
        assert a.call("version") == b.call("version")


# ============================================================================
# Startup failures leave nothing behind
# ============================================================================


def test_missing_executable(tmp_root: Path, make_conf):
    with pytest.raises(IoError):
        ElectrumD.with_conf(tmp_root / "nope" / "electrum", make_conf())
    assert list(tmp_root.iterdir()) == []


def test_daemon_exits_early(fake_exe: str, tmp_root: Path, make_conf):
    with pytest.raises(DaemonExitedError) as exc_info:
        ElectrumD.with_conf(fake_exe, make_conf(args=["--exit-code=3"]))
    assert exc_info.value.returncode == 3
    assert list(tmp_root.iterdir()) == []


def test_daemon_exits_early_self_assigned(fake_exe: str, tmp_root: Path, make_conf):
    conf = make_conf(args=["--exit-code=3"], port_mode=PortMode.SelfAssigned)
    with pytest.raises(DaemonExitedError):
        ElectrumD.with_conf(fake_exe, conf)
    assert list(tmp_root.iterdir()) == []


def test_bootstrap_failure_cleans_up(fake_exe: str, tmp_root: Path, make_conf):
    with pytest.raises(RpcError, match="wallet creation disabled"):
        ElectrumD.with_conf(fake_exe, make_conf(args=["--fail-create"]))
    assert list(tmp_root.iterdir()) == []


def test_startup_timeout(fake_exe: str, tmp_root: Path, make_conf):
    conf = make_conf(args=["--startup-delay=30"], startup_timeout=0.5)
    with pytest.raises(StartupTimeoutError):
        ElectrumD.with_conf(fake_exe, conf)
    assert list(tmp_root.iterdir()) == []


def test_startup_cancel(fake_exe: str, tmp_root: Path, make_conf):
    cancel = threading.Event()
    threading.Timer(0.5, cancel.set).start()
    conf = make_conf(args=["--startup-delay=30"], startup_timeout=None)
    with pytest.raises(StartupCancelledError):
        ElectrumD.with_conf(fake_exe, conf, cancel=cancel)
    assert list(tmp_root.iterdir()) == []


def test_startup_timeout_with_silent_daemon(fake_exe: str, tmp_root: Path, make_conf):
    # The daemon accepts connections but never replies, so every version call
    # would block for the full RPC timeout if it were not bounded.
    conf = make_conf(args=["--no-answer"], startup_timeout=0.5, poll_interval=0.25)

    start = time.monotonic()
    with pytest.raises(StartupTimeoutError):
        ElectrumD.with_conf(fake_exe, conf)
    assert time.monotonic() - start < 5
    assert list(tmp_root.iterdir()) == []


def test_startup_cancel_with_silent_daemon(fake_exe: str, tmp_root: Path, make_conf):
    cancel = threading.Event()
    threading.Timer(0.5, cancel.set).start()
    conf = make_conf(args=["--no-answer"], startup_timeout=None)

    start = time.monotonic()
    with pytest.raises(StartupCancelledError):
        ElectrumD.with_conf(fake_exe, conf, cancel=cancel)
    assert time.monotonic() - start < 10
    assert list(tmp_root.iterdir()) == []


# ============================================================================
# Teardown
# ============================================================================


def test_close_kills_unresponsive_daemon(fake_exe: str, tmp_root: Path, make_conf):
    electrumd = ElectrumD.with_conf(fake_exe, make_conf(args=["--ignore-stop"]))
    proc = electrumd.proc

    electrumd.close()

    assert proc.poll() is not None
    assert proc.returncode != 0
    assert list(tmp_root.iterdir()) == []


def test_kill_does_not_raise_when_rpc_is_gone(fake_exe: str, make_conf):
    with ElectrumD.with_conf(fake_exe, make_conf()) as electrumd:
        electrumd.kill()
        electrumd.proc.wait(timeout=5)
        with pytest.raises(DaemonExitedError):
            electrumd.call("version")
        electrumd.kill()


def test_stop_surfaces_rpc_failure(fake_exe: str, make_conf):
    with ElectrumD.with_conf(fake_exe, make_conf()) as electrumd:
        # Point the client at a dead port: the stop call fails and the process keeps running.
        electrumd.client.url = "http://127.0.0.1:1"
        with pytest.raises(RpcTransportError):
            electrumd.stop()
        assert electrumd.check_status()


def test_garbage_collected_handle_is_torn_down(fake_exe: str, tmp_root: Path, make_conf):
    electrumd = ElectrumD.with_conf(fake_exe, make_conf())
    proc = electrumd.proc
    workdir = electrumd.workdir.path

    del electrumd
    gc.collect()

    assert proc.wait(timeout=10) is not None
    assert not workdir.exists()
