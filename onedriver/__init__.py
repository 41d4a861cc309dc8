"""OpenNebula machine driver package."""

__all__ = [
    "cli",
    "client",
    "config",
    "constants",
    "driver",
    "exceptions",
    "images",
    "models",
    "ssh",
    "states",
    "template",
    "utils",
    "vmspec",
]
