"""Data models for the OpenNebula machine driver."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from onedriver.constants import (
    IMAGE_POLL_INTERVAL,
    IMAGE_POLL_TIMEOUT,
    SSH_KEY_NAME,
    SSH_POLL_ATTEMPTS,
    SSH_POLL_INTERVAL,
    START_POLL_ATTEMPTS,
    START_POLL_INTERVAL,
)


@dataclass
class DriverConfig:
    machine_name: str
    store_path: Path
    ssh_user: str
    cpu: str
    vcpu: Optional[int]
    memory_mb: int
    disk_size_mb: int
    network_name: str
    network_owner: str
    network_id: str
    datastore_id: int
    boot2docker_url: str
    endpoint: str
    auth_path: Path
    # Polling
    image_poll_interval: float = IMAGE_POLL_INTERVAL
    image_poll_timeout: float = IMAGE_POLL_TIMEOUT
    start_poll_interval: float = START_POLL_INTERVAL
    start_poll_attempts: int = START_POLL_ATTEMPTS
    ssh_poll_interval: float = SSH_POLL_INTERVAL
    ssh_poll_attempts: int = SSH_POLL_ATTEMPTS

    @property
    def machine_dir(self) -> Path:
        return self.store_path / "machines" / self.machine_name

    @property
    def ssh_key_path(self) -> Path:
        return self.machine_dir / SSH_KEY_NAME


@dataclass(frozen=True)
class NicSpec:
    network_name: str = ""
    network_owner: str = ""
    network_id: str = ""


@dataclass(frozen=True)
class DiskSpec:
    dev_prefix: str
    image_id: Optional[int] = None
    format: Optional[str] = None
    type: Optional[str] = None
    size_mb: Optional[int] = None


@dataclass(frozen=True)
class ContextSpec:
    ssh_public_key: str
    network: bool = True


@dataclass(frozen=True)
class GraphicsSpec:
    type: str = "vnc"
    listen: str = "0.0.0.0"


@dataclass(frozen=True)
class VMSpec:
    name: str
    cpu: str
    memory_mb: int
    nic: NicSpec
    disks: Tuple[DiskSpec, ...]
    context: ContextSpec
    graphics: GraphicsSpec
    vcpu: Optional[int] = None


@dataclass(frozen=True)
class ImageSpec:
    name: str
    path: str


@dataclass
class VMDescription:
    id: int
    name: str
    state: str
    lcm_state: str
    nics: List[Dict[str, str]] = field(default_factory=list)


@dataclass
class ImageDescription:
    id: int
    name: str
    state: str
