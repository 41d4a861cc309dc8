"""Boot image provisioning for the OpenNebula machine driver."""

from __future__ import annotations

from typing import Optional, Union

from onedriver.config import parse_datastore_id
from onedriver.constants import IMAGE_NAME_PREFIX, IMAGE_POLL_INTERVAL, IMAGE_POLL_TIMEOUT
from onedriver.exceptions import UnexpectedStateError
from onedriver.models import ImageSpec
from onedriver.utils import log, poll_until
from onedriver.vmspec import render_image_template

WAITING_IMAGE_STATES = {"INIT", "LOCKED"}


def image_name_for(machine_name: str) -> str:
    return f"{IMAGE_NAME_PREFIX}{machine_name}"


class ImageProvisioner:
    """Make sure the per-machine boot image exists and is READY.

    The image outlives the VM and is reused by name on later creates.
    """

    def __init__(self, client, interval: float = IMAGE_POLL_INTERVAL, timeout: float = IMAGE_POLL_TIMEOUT) -> None:
        self.client = client
        self.interval = interval
        self.timeout = timeout

    def ensure_image(self, machine_name: str, source_url: str, datastore_id: Union[str, int]) -> int:
        datastore = parse_datastore_id(datastore_id)
        name = image_name_for(machine_name)

        existing = self.client.lookup_image_by_name(name)
        if existing is not None:
            log("INFO", f"Reusing image {name} (ID={existing})")
            return existing

        log("INFO", f"Registering image {name} from {source_url} in datastore {datastore}")
        template = render_image_template(ImageSpec(name=name, path=source_url))
        image_id = self.client.create_image(template, datastore)
        self._wait_until_ready(image_id)
        log("INFO", "Boot2Docker image registered...")
        return image_id

    def _wait_until_ready(self, image_id: int) -> None:
        def _check() -> Optional[bool]:
            state = self.client.describe_image(image_id).state
            if state == "READY":
                return True
            if state in WAITING_IMAGE_STATES:
                log("DEBUG", f"Image {image_id} is {state}")
                return None
            log("ERROR", f"Unexpected image state {state}")
            raise UnexpectedStateError(f"Unexpected image state {state}")

        poll_until(
            _check,
            interval=self.interval,
            timeout=self.timeout,
            description=f"image {image_id} to become READY",
        )
