"""
Locating the Electrum executable.

An executable comes either from a provisioned download, selected with
`ELECTRUMD_VERSION`, or from a pre-installed path in `ELECTRUMD_EXE`.
Exactly one of the two must be configured.
"""

import os
from collections.abc import Mapping
from pathlib import Path

from electrumd.config.constants import DOWNLOAD_DIR_ENV, EXE_ENV, VERSION_ENV
from electrumd.errors import (
    BothFeatureAndEnvVarError,
    NeitherFeatureNorEnvVarError,
    NoEnvVarError,
    NoFeatureError,
    UnsupportedVersionError,
)

SUPPORTED_VERSIONS = ("4.1.5",)


def selected_version(environ: Mapping[str, str] = os.environ) -> str | None:
    """
    The provisioned version named by `ELECTRUMD_VERSION`, None when unset.

    Raises:
        UnsupportedVersionError: If the named version is not one we know how to run
    """
    version = environ.get(VERSION_ENV)
    if not version:
        return None
    if version not in SUPPORTED_VERSIONS:
        raise UnsupportedVersionError(version, SUPPORTED_VERSIONS)
    return version


def download_dir(environ: Mapping[str, str] = os.environ) -> Path:
    return Path(environ.get(DOWNLOAD_DIR_ENV) or Path.home() / ".cache" / "electrumd")


def downloaded_exe_path(environ: Mapping[str, str] = os.environ) -> str:
    """
    Path of the provisioned executable for the selected version.

    Raises:
        NoFeatureError: If no version is selected
    """
    version = selected_version(environ)
    if version is None:
        raise NoFeatureError()
    return str(download_dir(environ) / "electrum" / f"electrum-{version}" / "electrum.AppImage")


def env_exe_path(environ: Mapping[str, str] = os.environ) -> str:
    """
    Raises:
        NoEnvVarError: If `ELECTRUMD_EXE` is unset
    """
    path = environ.get(EXE_ENV)
    if not path:
        raise NoEnvVarError()
    return path


def exe_path(environ: Mapping[str, str] = os.environ) -> str:
    """
    Returns the daemon executable path, either provisioned or from `ELECTRUMD_EXE`.

    Raises:
        UnsupportedVersionError: If `ELECTRUMD_VERSION` names an unknown version
        BothFeatureAndEnvVarError: If both are configured
        NeitherFeatureNorEnvVarError: If neither is configured
    """
    try:
        provisioned = downloaded_exe_path(environ)
    except NoFeatureError:
        provisioned = None
    try:
        from_env = env_exe_path(environ)
    except NoEnvVarError:
        from_env = None

    if provisioned is not None and from_env is not None:
        raise BothFeatureAndEnvVarError()
    if provisioned is not None:
        return provisioned
    if from_env is not None:
        return from_env
    raise NeitherFeatureNorEnvVarError()
