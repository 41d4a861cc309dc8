"""Translation of OpenNebula VM states into driver states.

OpenNebula reports a coarse VM ``STATE`` and, while the VM is ``ACTIVE``,
a fine grained ``LCM_STATE``. Callers of the driver only care about a
handful of outcomes, so both levels collapse into :class:`DriverState`.
Anything not listed here is reported as ``Error``; an unrecognized state
must never look like a running machine.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict


class DriverState(Enum):
    NONE = "None"
    RUNNING = "Running"
    STARTING = "Starting"
    STOPPED = "Stopped"
    STOPPING = "Stopping"
    SAVED = "Saved"
    ERROR = "Error"

    def __str__(self) -> str:
        return self.value


COARSE_STATES: Dict[str, DriverState] = {
    "INIT": DriverState.STARTING,
    "PENDING": DriverState.STARTING,
    "HOLD": DriverState.STARTING,
    "POWEROFF": DriverState.STOPPED,
    "UNDEPLOYED": DriverState.STOPPED,
    "STOPPED": DriverState.SAVED,
    "SUSPENDED": DriverState.SAVED,
    "DONE": DriverState.ERROR,
    "FAILED": DriverState.ERROR,
}

ACTIVE_STATES: Dict[str, DriverState] = {
    # Guest keeps executing
    "RUNNING": DriverState.RUNNING,
    "DISK_SNAPSHOT": DriverState.RUNNING,
    "DISK_SNAPSHOT_REVERT": DriverState.RUNNING,
    "DISK_SNAPSHOT_DELETE": DriverState.RUNNING,
    "HOTPLUG": DriverState.RUNNING,
    "HOTPLUG_SNAPSHOT": DriverState.RUNNING,
    "HOTPLUG_NIC": DriverState.RUNNING,
    "HOTPLUG_SAVEAS": DriverState.RUNNING,
    # Staging, booting, migrating, resuming
    "PROLOG": DriverState.STARTING,
    "BOOT": DriverState.STARTING,
    "MIGRATE": DriverState.STARTING,
    "PROLOG_MIGRATE": DriverState.STARTING,
    "PROLOG_RESUME": DriverState.STARTING,
    "CLEANUP_RESUBMIT": DriverState.STARTING,
    "BOOT_UNKNOWN": DriverState.STARTING,
    "BOOT_POWEROFF": DriverState.STARTING,
    "BOOT_SUSPENDED": DriverState.STARTING,
    "BOOT_STOPPED": DriverState.STARTING,
    "PROLOG_UNDEPLOY": DriverState.STARTING,
    "BOOT_UNDEPLOY": DriverState.STARTING,
    "BOOT_MIGRATE": DriverState.STARTING,
    "PROLOG_MIGRATE_SUSPEND": DriverState.STARTING,
    "SAVE_MIGRATE": DriverState.STARTING,
    # Powered off while an operation runs
    "HOTPLUG_SAVEAS_POWEROFF": DriverState.STOPPED,
    "DISK_SNAPSHOT_POWEROFF": DriverState.STOPPED,
    "DISK_SNAPSHOT_REVERT_POWEROFF": DriverState.STOPPED,
    "DISK_SNAPSHOT_DELETE_POWEROFF": DriverState.STOPPED,
    "HOTPLUG_PROLOG_POWEROFF": DriverState.STOPPED,
    "HOTPLUG_EPILOG_POWEROFF": DriverState.STOPPED,
    "PROLOG_MIGRATE_POWEROFF": DriverState.STOPPED,
    "SAVE_STOP": DriverState.STOPPED,
    # Guest memory saved while an operation runs
    "HOTPLUG_SAVEAS_SUSPENDED": DriverState.SAVED,
    "DISK_SNAPSHOT_SUSPENDED": DriverState.SAVED,
    "DISK_SNAPSHOT_REVERT_SUSPENDED": DriverState.SAVED,
    "DISK_SNAPSHOT_DELETE_SUSPENDED": DriverState.SAVED,
    # Shutting down or cleaning up
    "EPILOG_STOP": DriverState.STOPPING,
    "EPILOG": DriverState.STOPPING,
    "SHUTDOWN_UNDEPLOY": DriverState.STOPPING,
    "EPILOG_UNDEPLOY": DriverState.STOPPING,
    "SAVE_SUSPEND": DriverState.STOPPING,
    "SHUTDOWN": DriverState.STOPPING,
    "SHUTDOWN_POWEROFF": DriverState.STOPPING,
    "CANCEL": DriverState.STOPPING,
    "CLEANUP_DELETE": DriverState.STOPPING,
}


def translate(vm_state: str, lcm_state: str) -> DriverState:
    """Map an OpenNebula (STATE, LCM_STATE) pair onto a DriverState."""
    if vm_state == "ACTIVE":
        return ACTIVE_STATES.get(lcm_state, DriverState.ERROR)
    return COARSE_STATES.get(vm_state, DriverState.ERROR)
