"""Shared test fixtures for the OpenNebula machine driver."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple

import pytest

from onedriver.exceptions import NotFoundError
from onedriver.models import DriverConfig, ImageDescription, VMDescription


class FakeOneClient:
    """Scripted stand-in for OneClient.

    ``vm_states`` and ``image_states`` are consumed one entry per describe
    call; the last entry repeats once the script runs out.
    """

    def __init__(self, machine_name: str = "test-vm") -> None:
        self.machine_name = machine_name
        self.vms: Dict[str, int] = {}
        self.images: Dict[str, int] = {}
        self.vm_states: List[Tuple[str, str]] = [("ACTIVE", "RUNNING")]
        self.image_states: List[str] = ["READY"]
        self.nics: List[Dict[str, str]] = [{"IP": "10.0.0.5", "NETWORK": "private"}]
        self.created_vms: List[Tuple[str, bool]] = []
        self.created_images: List[Tuple[str, int]] = []
        self.actions: List[Tuple[str, int]] = []
        self.lookups: List[str] = []
        self.vm_describes = 0
        self.image_describes = 0
        self._next_id = 100

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    @staticmethod
    def _next(script: list):
        return script.pop(0) if len(script) > 1 else script[0]

    def lookup_vm_by_name(self, name: str) -> int:
        self.lookups.append(name)
        if name not in self.vms:
            raise NotFoundError(f"VM '{name}' not found")
        return self.vms[name]

    def describe_vm(self, vm_id: int) -> VMDescription:
        self.vm_describes += 1
        state, lcm_state = self._next(self.vm_states)
        return VMDescription(id=vm_id, name=self.machine_name, state=state, lcm_state=lcm_state, nics=list(self.nics))

    def create_vm(self, template: str, defer_start: bool = False) -> int:
        vm_id = self._new_id()
        self.created_vms.append((template, defer_start))
        self.vms[self.machine_name] = vm_id
        return vm_id

    def resume_vm(self, vm_id: int) -> None:
        self.actions.append(("resume", vm_id))

    def power_off_vm(self, vm_id: int, hard: bool = False) -> None:
        self.actions.append(("poweroff-hard" if hard else "poweroff", vm_id))

    def terminate_vm(self, vm_id: int, hard: bool = False) -> None:
        self.actions.append(("terminate-hard" if hard else "terminate", vm_id))

    def reboot_vm(self, vm_id: int) -> None:
        self.actions.append(("reboot", vm_id))

    def lookup_image_by_name(self, name: str) -> Optional[int]:
        return self.images.get(name)

    def describe_image(self, image_id: int) -> ImageDescription:
        self.image_describes += 1
        name = next((n for n, i in self.images.items() if i == image_id), "")
        return ImageDescription(id=image_id, name=name, state=self._next(self.image_states))

    def create_image(self, template: str, datastore_id: int) -> int:
        image_id = self._new_id()
        self.created_images.append((template, datastore_id))
        name = template.splitlines()[0].split("=", 1)[1].strip('"')
        self.images[name] = image_id
        return image_id


@pytest.fixture
def fake_client() -> FakeOneClient:
    return FakeOneClient()


@pytest.fixture
def default_driver_config(tmp_path) -> DriverConfig:
    """Return a minimal DriverConfig with sensible defaults."""
    return DriverConfig(
        machine_name="test-vm",
        store_path=tmp_path / "store",
        ssh_user="docker",
        cpu="1",
        vcpu=None,
        memory_mb=1024,
        disk_size_mb=20000,
        network_name="private",
        network_owner="",
        network_id="",
        datastore_id=1,
        boot2docker_url="https://example.com/boot2docker.iso",
        endpoint="http://one.example.com:2633/RPC2",
        auth_path=tmp_path / "one_auth",
    )


@pytest.fixture
def public_key(default_driver_config) -> str:
    """Write a public key where the driver expects to find it."""
    key = "ssh-rsa AAAAB3NzaC1yc2EAAAADAQABAAABAQC test@host\n"
    key_path: Path = default_driver_config.ssh_key_path
    key_path.parent.mkdir(parents=True, exist_ok=True)
    key_path.write_text("private")
    key_path.with_name(key_path.name + ".pub").write_text(key)
    return key


# Environment variables that parse_env() reads
_PARSE_ENV_VARS = [
    "ONE_MEMORY",
    "ONE_CPU",
    "ONE_SSH_USER",
    "ONE_VCPU",
    "ONE_DISK_SIZE",
    "ONE_NETWORK_NAME",
    "ONE_NETWORK_ID",
    "ONE_NETWORK_OWNER",
    "ONE_DATASTORE_ID",
    "ONE_BOOT2DOCKER_URL",
    "ONE_XMLRPC",
    "ONE_AUTH",
    "ONE_CONFIG",
    "MACHINE_STORAGE_PATH",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Clear all environment variables that parse_env() reads."""
    for key in _PARSE_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
