"""
Errors raised by the harness.

Every failure surfaces as a subclass of `Error`; lower level exceptions are
chained with `raise ... from`.
"""

from typing import Any


class Error(Exception):
    """Base class for all harness errors."""


class IoError(Error):
    """Filesystem or process-spawn failure."""


class DaemonExitedError(IoError):
    """The daemon process is no longer running."""

    def __init__(self, name: str, returncode: int | None):
        self.returncode = returncode
        super().__init__(f"process '{name}' exited with code {returncode}")


class RpcError(Error):
    """Raised when an RPC call returns an error."""

    def __init__(self, error: dict[str, Any]):
        self.code = error.get("code")
        self.message = error.get("message")
        self.data = error.get("data")
        super().__init__(f"RPC Error {self.code}: {self.message}")


class RpcTransportError(Error):
    """The HTTP request carrying an RPC call failed."""


class JsonError(Error):
    """A value could not be serialized to, or parsed from, JSON."""


class StatusFormatError(Error):
    """The daemon status file does not contain a readable port."""


class StartupTimeoutError(Error, TimeoutError):
    """A bounded startup wait ran out of time."""


class StartupCancelledError(Error):
    """A startup wait was cancelled by the caller."""


class NoFeatureError(Error):
    def __init__(self):
        super().__init__(
            "Called a method requiring a provisioned Electrum version, but none is selected"
        )


class UnsupportedVersionError(Error):
    def __init__(self, version: str, supported: tuple[str, ...]):
        self.version = version
        super().__init__(
            f"Electrum version {version} is not supported, expected one of {', '.join(supported)}"
        )


class NoEnvVarError(Error):
    def __init__(self):
        super().__init__(
            "Called a method requiring env var `ELECTRUMD_EXE` to be set, but it's not"
        )


class NeitherFeatureNorEnvVarError(Error):
    def __init__(self):
        super().__init__(
            "Called a method requiring env var `ELECTRUMD_EXE` or a provisioned version, "
            "but neither are set"
        )


class BothFeatureAndEnvVarError(Error):
    def __init__(self):
        super().__init__(
            "Called a method requiring env var `ELECTRUMD_EXE` or a provisioned version, "
            "but both are set"
        )
