"""SSH key handling and reachability checks for the OpenNebula machine driver."""

from __future__ import annotations

import socket
from pathlib import Path
from typing import Optional

from onedriver.constants import SSH_CONNECT_TIMEOUT, SSH_POLL_ATTEMPTS, SSH_POLL_INTERVAL, SSH_PORT
from onedriver.exceptions import ManagerError, PollTimeoutError, SSHTimeoutError
from onedriver.utils import ensure_directory, log, poll_until, run


def public_key_path(key_path: Path) -> Path:
    return key_path.with_name(key_path.name + ".pub")


def generate_ssh_key(key_path: Path) -> None:
    """Create an RSA keypair at ``key_path`` unless one is already there."""
    if key_path.exists():
        log("DEBUG", f"SSH key already present at {key_path}")
        return
    ensure_directory(key_path.parent)
    cmd = ["ssh-keygen", "-q", "-t", "rsa", "-b", "2048", "-N", "", "-f", str(key_path)]
    try:
        result = run(cmd, check=False, capture_output=True)
    except FileNotFoundError as exc:
        raise ManagerError("ssh-keygen not found; install OpenSSH client tools") from exc
    if result.returncode != 0:
        details = (result.stderr or result.stdout or "").strip()
        raise ManagerError(f"Failed to generate SSH key at {key_path}: {details}")
    key_path.chmod(0o600)


def read_public_key(key_path: Path) -> str:
    pub = public_key_path(key_path)
    try:
        return pub.read_text()
    except OSError as exc:
        raise ManagerError(f"Failed to read SSH public key {pub}: {exc}") from exc


def ssh_banner_ready(host: str, port: int = SSH_PORT, timeout: float = SSH_CONNECT_TIMEOUT) -> bool:
    """Return True if ``host:port`` accepts TCP and greets with an SSH banner."""
    try:
        with socket.create_connection((host, port), timeout=timeout) as sock:
            banner = sock.recv(64)
    except OSError:
        return False
    return banner.startswith(b"SSH-")


def wait_for_ssh(
    host: str,
    port: int = SSH_PORT,
    attempts: int = SSH_POLL_ATTEMPTS,
    interval: float = SSH_POLL_INTERVAL,
    connect_timeout: float = SSH_CONNECT_TIMEOUT,
) -> None:
    def _check() -> Optional[bool]:
        if ssh_banner_ready(host, port, timeout=connect_timeout):
            return True
        log("DEBUG", f"SSH on {host}:{port} not ready yet")
        return None

    try:
        poll_until(_check, interval=interval, attempts=attempts, description=f"SSH on {host}:{port}")
    except PollTimeoutError as exc:
        raise SSHTimeoutError(str(exc)) from exc
    log("SUCCESS", f"SSH is ready on {host}")
