"""Machine lifecycle for the OpenNebula driver."""

from __future__ import annotations

from typing import Optional

from onedriver import ssh
from onedriver.constants import DOCKER_PORT, DRIVER_NAME, SSH_PORT
from onedriver.exceptions import AddressNotSetError, RemoteError, UnexpectedStateError
from onedriver.images import ImageProvisioner
from onedriver.models import DriverConfig, VMDescription
from onedriver.states import DriverState, translate
from onedriver.utils import log, poll_until
from onedriver.vmspec import build_vm_spec, render_vm_template


def address_from(description: VMDescription) -> Optional[str]:
    """Return the first NIC address reported for the VM, if any."""
    for nic in description.nics:
        ip = nic.get("IP")
        if ip:
            return ip
    return None


class Driver:
    """Drive one named VM through create/start/stop/... on OpenNebula.

    Nothing about the VM is persisted; each verb looks the VM up by name
    once and passes the numeric ID along to the calls it makes.
    """

    def __init__(self, cfg: DriverConfig, client, provisioner: Optional[ImageProvisioner] = None) -> None:
        self.cfg = cfg
        self.client = client
        self.provisioner = provisioner or ImageProvisioner(
            client,
            interval=cfg.image_poll_interval,
            timeout=cfg.image_poll_timeout,
        )
        self.ip_address: Optional[str] = None

    @staticmethod
    def driver_name() -> str:
        return DRIVER_NAME

    def _vm_id(self) -> int:
        return self.client.lookup_vm_by_name(self.cfg.machine_name)

    def create(self) -> None:
        log("INFO", "Creating SSH key...")
        ssh.generate_ssh_key(self.cfg.ssh_key_path)
        public_key = ssh.read_public_key(self.cfg.ssh_key_path)

        image_id = self.provisioner.ensure_image(
            self.cfg.machine_name,
            self.cfg.boot2docker_url,
            self.cfg.datastore_id,
        )

        spec = build_vm_spec(self.cfg, image_id, public_key)
        log("INFO", "Starting VM...")
        vm_id = self.client.create_vm(render_vm_template(spec), defer_start=False)
        log("INFO", f"VM {self.cfg.machine_name} created (ID={vm_id})")

        self.ip_address = self._ip_of(vm_id)
        self._start(vm_id, tolerate_resume=True)

    def start(self) -> None:
        self._start(self._vm_id())

    def _start(self, vm_id: int, tolerate_resume: bool = False) -> None:
        try:
            self.client.resume_vm(vm_id)
        except RemoteError as exc:
            if not tolerate_resume:
                raise
            # A freshly allocated VM is PENDING and cannot be resumed; the
            # state poll below tells whether it comes up.
            log("WARN", f"Resume of VM {vm_id} not accepted: {exc}")

        def _check() -> Optional[DriverState]:
            state = self._state_of(vm_id)
            if state is DriverState.RUNNING:
                return state
            if state is DriverState.ERROR:
                raise UnexpectedStateError("VM in error state")
            log("DEBUG", f"VM {vm_id} is {state}")
            return None

        poll_until(
            _check,
            interval=self.cfg.start_poll_interval,
            attempts=self.cfg.start_poll_attempts,
            description=f"VM {self.cfg.machine_name} to reach Running",
        )
        log("SUCCESS", f"VM {self.cfg.machine_name} is running")

        if not self.ip_address:
            self.ip_address = self._ip_of(vm_id)

        log("INFO", "Waiting for SSH...")
        ssh.wait_for_ssh(
            self.ip_address,
            port=SSH_PORT,
            attempts=self.cfg.ssh_poll_attempts,
            interval=self.cfg.ssh_poll_interval,
        )

    def stop(self) -> None:
        self.client.power_off_vm(self._vm_id(), hard=False)

    def kill(self) -> None:
        self.client.power_off_vm(self._vm_id(), hard=True)

    def restart(self) -> None:
        self.client.reboot_vm(self._vm_id())

    def remove(self) -> None:
        self.client.terminate_vm(self._vm_id(), hard=True)

    def get_state(self) -> DriverState:
        return self._state_of(self._vm_id())

    def _state_of(self, vm_id: int) -> DriverState:
        description = self.client.describe_vm(vm_id)
        return translate(description.state, description.lcm_state)

    def get_ip(self) -> str:
        return self._ip_of(self._vm_id())

    def _ip_of(self, vm_id: int) -> str:
        ip = address_from(self.client.describe_vm(vm_id))
        if ip:
            self.ip_address = ip
        if not self.ip_address:
            raise AddressNotSetError("IP address is not set")
        return self.ip_address

    def get_url(self) -> str:
        return f"tcp://{self.get_ip()}:{DOCKER_PORT}"

    def get_ssh_hostname(self) -> str:
        return self.get_ip()

    def get_ssh_username(self) -> str:
        return self.cfg.ssh_user
