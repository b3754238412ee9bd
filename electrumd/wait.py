"""
Waiting utilities for startup synchronization.
"""

import logging
import threading
import time
from collections.abc import Callable
from typing import Any, TypeVar

from electrumd.errors import StartupCancelledError, StartupTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def deadline_after(timeout: float | None) -> float | None:
    """Monotonic deadline `timeout` seconds from now, None for no deadline."""
    if timeout is None:
        return None
    return time.monotonic() + timeout


def time_left(deadline: float | None) -> float | None:
    """Seconds until `deadline` (never negative), None for no deadline."""
    if deadline is None:
        return None
    return max(deadline - time.monotonic(), 0.0)


def _sleep(step: float, cancel: threading.Event | None, error_with: str):
    if cancel is None:
        time.sleep(step)
    elif cancel.wait(step):
        raise StartupCancelledError(f"{error_with}: cancelled")


def wait_until_with_value(
    fn: Callable[[], T],
    predicate: Callable[[T], bool],
    error_with: str = "Timed out",
    timeout: float | None = None,
    step: float = 0.25,
    cancel: threading.Event | None = None,
    ignore: tuple[type[Exception], ...] = (),
) -> T:
    """
    Call `fn` every `step` seconds until `predicate` accepts its value, and return it.

    Exceptions listed in `ignore` count as "not yet"; anything else propagates.
    A `timeout` of None waits forever, leaving the caller's own timeout (or
    `cancel`) as the only way out. The timeout is measured in wall-clock time,
    so `fn` must bound its own blocking calls for it to hold.

    Raises:
        StartupTimeoutError: If `timeout` elapsed first
        StartupCancelledError: If `cancel` was set
    """
    deadline = deadline_after(timeout)
    while True:
        if cancel is not None and cancel.is_set():
            raise StartupCancelledError(f"{error_with}: cancelled")
        try:
            r = fn()
            if predicate(r):
                return r
        except ignore as e:
            ety = type(e)
            logger.debug(f"caught exception {ety}, will keep waiting: {e}")

        remaining = time_left(deadline)
        if remaining is None:
            _sleep(step, cancel, error_with)
        elif remaining <= 0:
            raise StartupTimeoutError(f"{error_with} after {timeout}s")
        else:
            _sleep(min(step, remaining), cancel, error_with)


def wait_until(
    fn: Callable[[], Any],
    error_with: str = "Timed out",
    timeout: float | None = None,
    step: float = 0.25,
    cancel: threading.Event | None = None,
    ignore: tuple[type[Exception], ...] = (),
) -> None:
    """
    Wait until a function call returns a truth value, checking every `step` seconds.
    """
    wait_until_with_value(
        fn,
        bool,
        error_with=error_with,
        timeout=timeout,
        step=step,
        cancel=cancel,
        ignore=ignore,
    )
