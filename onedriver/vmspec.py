"""VM and image template assembly for the OpenNebula machine driver."""

from __future__ import annotations

from onedriver.models import (
    ContextSpec,
    DiskSpec,
    DriverConfig,
    GraphicsSpec,
    ImageSpec,
    NicSpec,
    VMSpec,
)
from onedriver.template import TemplateBuilder

DISK_DEV_PREFIX = "sd"


def build_vm_spec(cfg: DriverConfig, image_id: int, public_key: str) -> VMSpec:
    """Describe the machine to instantiate.

    Exactly one network selector is expected on ``cfg``; config parsing
    rejects the other combinations before we get here.
    """
    if cfg.network_name:
        nic = NicSpec(network_name=cfg.network_name, network_owner=cfg.network_owner)
    else:
        nic = NicSpec(network_id=cfg.network_id)

    disks = (
        DiskSpec(dev_prefix=DISK_DEV_PREFIX, image_id=image_id),
        DiskSpec(dev_prefix=DISK_DEV_PREFIX, format="raw", type="fs", size_mb=cfg.disk_size_mb),
    )

    return VMSpec(
        name=cfg.machine_name,
        cpu=cfg.cpu,
        memory_mb=cfg.memory_mb,
        vcpu=cfg.vcpu,
        nic=nic,
        disks=disks,
        context=ContextSpec(ssh_public_key=public_key),
        graphics=GraphicsSpec(),
    )


def render_vm_template(spec: VMSpec) -> str:
    template = TemplateBuilder()
    template.add_value("NAME", spec.name)
    template.add_value("CPU", spec.cpu)
    template.add_value("MEMORY", spec.memory_mb)
    if spec.vcpu is not None:
        template.add_value("VCPU", spec.vcpu)

    nic = template.new_vector("NIC")
    if spec.nic.network_name:
        nic.add_value("NETWORK", spec.nic.network_name)
        if spec.nic.network_owner:
            nic.add_value("NETWORK_UNAME", spec.nic.network_owner)
    if spec.nic.network_id:
        nic.add_value("NETWORK_ID", spec.nic.network_id)

    for disk in spec.disks:
        vector = template.new_vector("DISK")
        if disk.image_id is not None:
            vector.add_value("IMAGE_ID", disk.image_id)
        if disk.format:
            vector.add_value("FORMAT", disk.format)
        if disk.type:
            vector.add_value("TYPE", disk.type)
        if disk.size_mb is not None:
            vector.add_value("SIZE", disk.size_mb)
        vector.add_value("DEV_PREFIX", disk.dev_prefix)

    context = template.new_vector("CONTEXT")
    context.add_value("NETWORK", "YES" if spec.context.network else "NO")
    context.add_value("SSH_PUBLIC_KEY", spec.context.ssh_public_key)

    graphics = template.new_vector("GRAPHICS")
    graphics.add_value("LISTEN", spec.graphics.listen)
    graphics.add_value("TYPE", spec.graphics.type)
    return template.render()


def render_image_template(spec: ImageSpec) -> str:
    template = TemplateBuilder()
    template.add_value("NAME", spec.name)
    template.add_value("PATH", spec.path)
    return template.render()
