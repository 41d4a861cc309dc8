"""Utility functions for the OpenNebula machine driver."""

from __future__ import annotations

import os
import subprocess
import time
from pathlib import Path
from typing import Callable, List, Optional, TypeVar

from onedriver.constants import _LOG_VERBOSE
from onedriver.exceptions import PollTimeoutError

T = TypeVar("T")


def log(level: str, message: str) -> None:
    """Lightweight structured logging with coloured level tags."""
    if level == "DEBUG" and not _LOG_VERBOSE:
        return
    colours = {
        "INFO": "\033[0;34m",
        "WARN": "\033[1;33m",
        "ERROR": "\033[0;31m",
        "SUCCESS": "\033[0;32m",
        "DEBUG": "\033[0;90m",
    }
    colour = colours.get(level, "")
    reset = "\033[0m" if colour else ""
    print(f"{colour}[{level}]{reset} {message}", flush=True)


def get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(name, default)


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def poll_until(
    check: Callable[[], Optional[T]],
    interval: float,
    attempts: Optional[int] = None,
    timeout: Optional[float] = None,
    description: str = "condition",
) -> T:
    """Call ``check`` until it returns something other than None.

    ``check`` raises to abort on a fatal state. Sleeps ``interval`` seconds
    between attempts only. Gives up with PollTimeoutError once ``attempts``
    calls were made or ``timeout`` seconds have passed, whichever comes first.
    """
    if attempts is None and timeout is None:
        raise ValueError("poll_until needs attempts or timeout")
    deadline = time.monotonic() + timeout if timeout is not None else None
    made = 0
    while True:
        result = check()
        made += 1
        if result is not None:
            return result
        if attempts is not None and made >= attempts:
            raise PollTimeoutError(f"Timed out waiting for {description} after {made} attempts")
        if deadline is not None and time.monotonic() + interval > deadline:
            raise PollTimeoutError(f"Timed out waiting for {description} after {timeout:g}s")
        time.sleep(interval)


def run(cmd: List[str], check: bool = True, **kwargs) -> subprocess.CompletedProcess:
    """Run command with logging."""
    log("DEBUG", f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, check=check, text=True, **kwargs)
    return result
