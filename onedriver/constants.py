"""Global constants and option defaults for the OpenNebula machine driver."""

from __future__ import annotations

import os
from pathlib import Path
from typing import NamedTuple


class DriverOption(NamedTuple):
    name: str
    env: str
    default: str
    help: str


DRIVER_NAME = "opennebula"

DEFAULT_SSH_USER = "docker"
DEFAULT_CPU = "1"
DEFAULT_VCPU = ""
DEFAULT_MEMORY = "1024"
DEFAULT_DISK_SIZE = "20000"
DEFAULT_DATASTORE_ID = "1"
DEFAULT_BOOT2DOCKER_URL = "https://s3.eu-central-1.amazonaws.com/one-boot2d/boot2docker-v1.9.1.iso"

OPTION_PREFIX = "opennebula-"

DRIVER_OPTIONS = (
    DriverOption("opennebula-memory", "ONE_MEMORY", DEFAULT_MEMORY, "Size of memory for VM in MB"),
    DriverOption("opennebula-cpu", "ONE_CPU", DEFAULT_CPU, "CPU value for the VM"),
    DriverOption("opennebula-ssh-user", "ONE_SSH_USER", DEFAULT_SSH_USER, "Set the name of the SSH user"),
    DriverOption("opennebula-vcpu", "ONE_VCPU", DEFAULT_VCPU, "VCPUs for the VM"),
    DriverOption("opennebula-disk-size", "ONE_DISK_SIZE", DEFAULT_DISK_SIZE, "Size of disk for VM in MB"),
    DriverOption("opennebula-network-name", "ONE_NETWORK_NAME", "", "Network to connect the machine to"),
    DriverOption("opennebula-network-id", "ONE_NETWORK_ID", "", "Network ID to connect the machine to"),
    DriverOption(
        "opennebula-network-owner", "ONE_NETWORK_OWNER", "", "User ID of the Network to connect the machine to"
    ),
    DriverOption(
        "opennebula-datastore-id", "ONE_DATASTORE_ID", DEFAULT_DATASTORE_ID, "Datastore ID of the Boot2Docker image"
    ),
    DriverOption(
        "opennebula-boot2docker-url",
        "ONE_BOOT2DOCKER_URL",
        DEFAULT_BOOT2DOCKER_URL,
        "The URL of the boot2docker image. By default it uses one hosted by OpenNebula.org",
    ),
)

# Transport and authentication, read the same way the OpenNebula CLI tools do.
DEFAULT_XMLRPC_ENDPOINT = "http://localhost:2633/RPC2"
XMLRPC_ENV = "ONE_XMLRPC"
AUTH_ENV = "ONE_AUTH"
DEFAULT_AUTH_PATH = Path("~/.one/one_auth")
CONFIG_ENV = "ONE_CONFIG"
CONFIG_SECTION = "opennebula"

STORAGE_PATH_ENV = "MACHINE_STORAGE_PATH"
DEFAULT_STORAGE_PATH = Path("~/.docker/machine")
SSH_KEY_NAME = "id_rsa"

IMAGE_NAME_PREFIX = "b2d-"
DOCKER_PORT = 2376
SSH_PORT = 22

IMAGE_POLL_INTERVAL = 1.0
IMAGE_POLL_TIMEOUT = 600.0
START_POLL_INTERVAL = 2.0
START_POLL_ATTEMPTS = 50
SSH_POLL_INTERVAL = 3.0
SSH_POLL_ATTEMPTS = 60
SSH_CONNECT_TIMEOUT = 5.0

# vmpool.info filter: all resources, full range, every state except DONE
POOL_FILTER_ALL = -2
POOL_STATE_ANY = -1

TRUTHY = {"1", "true", "yes", "on"}
_LOG_VERBOSE = os.environ.get("MACHINE_DEBUG", "").lower() in TRUTHY
