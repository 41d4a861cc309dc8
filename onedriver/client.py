"""OpenNebula XML-RPC client used by the machine driver.

Wraps ``pyone.OneServer`` behind the small set of calls the driver needs:
named lookups, describes and mutations for VMs and images. Every pyone
error and every transport failure (refused connection, HTTP or XML-RPC
protocol error) is re-raised as :class:`RemoteError` so callers only deal
with the driver's own exception hierarchy.
"""

from __future__ import annotations

import xmlrpc.client
from typing import Any, Dict, List, Optional

try:
    import pyone  # type: ignore
    import requests  # type: ignore
    from pyone import IMAGE_STATES, LCM_STATE, VM_STATE  # type: ignore
except ImportError as exc:  # pragma: no cover
    raise SystemExit("pyone and requests are required but not installed") from exc

from onedriver.constants import POOL_FILTER_ALL, POOL_STATE_ANY
from onedriver.exceptions import AmbiguousNameError, NotFoundError, RemoteError
from onedriver.models import ImageDescription, VMDescription
from onedriver.utils import log


def _enum_name(enum_cls, value: Any) -> str:
    """Return the symbolic name of an orchestrator state number."""
    try:
        return enum_cls(int(value)).name
    except (TypeError, ValueError):
        return str(value)


def _field(obj: Any, key: str) -> Any:
    """Read ``key`` from a template that is either a mapping or an object."""
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _nic_attributes(template: Any) -> List[Dict[str, str]]:
    nics = []
    for nic in _as_list(_field(template, "NIC")):
        attrs: Dict[str, str] = {}
        for key in ("IP", "IP6", "MAC", "NETWORK", "NETWORK_ID", "NIC_ID"):
            value = _field(nic, key)
            if value is not None and value != "":
                attrs[key] = str(value)
        nics.append(attrs)
    return nics


class OneClient:
    """Named-lookup, describe and mutate calls against an OpenNebula front-end."""

    def __init__(self, endpoint: str, session: str, server: Optional[Any] = None) -> None:
        self.endpoint = endpoint
        self.one = server if server is not None else pyone.OneServer(endpoint, session=session)

    def _call(self, what: str, method, *args):
        log("DEBUG", f"OpenNebula call: {what}{args}")
        try:
            return method(*args)
        except pyone.OneNoExistsException as exc:
            raise NotFoundError(f"Failed to {what}: {exc}") from exc
        except pyone.OneException as exc:
            raise RemoteError(f"Failed to {what}: {exc}") from exc
        except (requests.exceptions.RequestException, xmlrpc.client.Error, OSError) as exc:
            raise RemoteError(f"Failed to {what}: cannot reach {self.endpoint}: {exc}") from exc

    @staticmethod
    def _single_match(entries: List[Any], kind: str, name: str) -> Optional[int]:
        matches = [entry for entry in entries if entry.NAME == name]
        if not matches:
            return None
        if len(matches) > 1:
            ids = ", ".join(str(entry.ID) for entry in matches)
            raise AmbiguousNameError(f"Multiple {kind}s named '{name}' (IDs {ids})")
        return int(matches[0].ID)

    # VMs

    def lookup_vm_by_name(self, name: str) -> int:
        pool = self._call(
            "list VMs", self.one.vmpool.info, POOL_FILTER_ALL, -1, -1, POOL_STATE_ANY
        )
        vm_id = self._single_match(_as_list(getattr(pool, "VM", None)), "VM", name)
        if vm_id is None:
            raise NotFoundError(f"VM '{name}' not found")
        return vm_id

    def describe_vm(self, vm_id: int) -> VMDescription:
        info = self._call(f"get VM info {vm_id}", self.one.vm.info, vm_id)
        return VMDescription(
            id=int(info.ID),
            name=str(info.NAME),
            state=_enum_name(VM_STATE, info.STATE),
            lcm_state=_enum_name(LCM_STATE, info.LCM_STATE),
            nics=_nic_attributes(_field(info, "TEMPLATE")),
        )

    def create_vm(self, template: str, defer_start: bool = False) -> int:
        return int(self._call("create VM", self.one.vm.allocate, template, defer_start))

    def _action(self, action: str, vm_id: int) -> None:
        self._call(f"{action} VM {vm_id}", self.one.vm.action, action, vm_id)

    def resume_vm(self, vm_id: int) -> None:
        self._action("resume", vm_id)

    def power_off_vm(self, vm_id: int, hard: bool = False) -> None:
        self._action("poweroff-hard" if hard else "poweroff", vm_id)

    def terminate_vm(self, vm_id: int, hard: bool = False) -> None:
        self._action("terminate-hard" if hard else "terminate", vm_id)

    def reboot_vm(self, vm_id: int) -> None:
        self._action("reboot", vm_id)

    # Images

    def lookup_image_by_name(self, name: str) -> Optional[int]:
        pool = self._call("list images", self.one.imagepool.info, POOL_FILTER_ALL, -1, -1)
        return self._single_match(_as_list(getattr(pool, "IMAGE", None)), "image", name)

    def describe_image(self, image_id: int) -> ImageDescription:
        info = self._call(f"get image info {image_id}", self.one.image.info, image_id)
        return ImageDescription(
            id=int(info.ID),
            name=str(info.NAME),
            state=_enum_name(IMAGE_STATES, info.STATE),
        )

    def create_image(self, template: str, datastore_id: int) -> int:
        return int(self._call("create image", self.one.image.allocate, template, datastore_id))
