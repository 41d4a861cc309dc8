"""CLI entry points for the OpenNebula machine driver."""

from __future__ import annotations

import argparse
import dataclasses
from pathlib import Path
from typing import Callable, Dict, List, Optional

from onedriver.client import OneClient
from onedriver.config import load_session, parse_env
from onedriver.constants import DRIVER_OPTIONS
from onedriver.driver import Driver
from onedriver.exceptions import ManagerError, RemoteError
from onedriver.models import DriverConfig
from onedriver.states import DriverState
from onedriver.utils import log

VERB_HELP = {
    "create": "Create the boot image and VM, then start it",
    "start": "Start the VM and wait for SSH",
    "stop": "Power the VM off gracefully",
    "restart": "Reboot the VM",
    "kill": "Power the VM off immediately",
    "rm": "Terminate the VM",
    "status": "Print the VM state",
    "ip": "Print the VM IP address",
    "url": "Print the Docker engine URL",
    "ssh-hostname": "Print the SSH hostname",
    "ssh-username": "Print the SSH username",
    "config": "Show resolved driver configuration and exit",
}

# Verbs that take the driver option flags
OPTION_VERBS = {"create", "config"}


def _dest(option_name: str) -> str:
    return option_name.replace("-", "_")


def show_config(cfg: DriverConfig) -> None:
    """Print the resolved driver configuration."""
    for field in dataclasses.fields(cfg):
        print(f"  {field.name}: {getattr(cfg, field.name)}")
    print(f"  ssh_key_path: {cfg.ssh_key_path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="OpenNebula machine driver")
    parser.add_argument("--config", type=Path, default=None, help="YAML file with driver option defaults")
    parser.add_argument("--storage-path", type=Path, default=None, help="Machine store directory")
    subparsers = parser.add_subparsers(dest="verb", metavar="VERB")
    subparsers.required = True
    for verb, help_text in VERB_HELP.items():
        sub = subparsers.add_parser(verb, help=help_text)
        if verb in OPTION_VERBS:
            for option in DRIVER_OPTIONS:
                sub.add_argument(
                    f"--{option.name}",
                    dest=_dest(option.name),
                    default=None,
                    help=f"{option.help} (env {option.env}, default '{option.default}')",
                )
        sub.add_argument("name", help="Machine name")
    return parser


def run_verb(driver: Driver, verb: str) -> Optional[str]:
    """Run ``verb`` against ``driver`` and return any value to print."""
    actions: Dict[str, Callable[[], object]] = {
        "create": driver.create,
        "start": driver.start,
        "stop": driver.stop,
        "restart": driver.restart,
        "kill": driver.kill,
        "rm": driver.remove,
        "status": driver.get_state,
        "ip": driver.get_ip,
        "url": driver.get_url,
        "ssh-hostname": driver.get_ssh_hostname,
        "ssh-username": driver.get_ssh_username,
    }
    result = actions[verb]()
    return None if result is None else str(result)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    overrides = {option.name: getattr(args, _dest(option.name), None) for option in DRIVER_OPTIONS}

    try:
        cfg = parse_env(
            args.name,
            overrides=overrides,
            config_path=args.config,
            store_path=args.storage_path,
            creating=args.verb == "create",
        )
        if args.verb == "config":
            show_config(cfg)
            return 0

        client = OneClient(cfg.endpoint, load_session(cfg.auth_path))
        driver = Driver(cfg, client)
        output = run_verb(driver, args.verb)
    except ManagerError as exc:
        # an unresolved VM reads as state None alongside the error
        if args.verb == "status" and isinstance(exc, RemoteError):
            print(DriverState.NONE, flush=True)
        log("ERROR", str(exc))
        return 1
    except KeyboardInterrupt:
        log("WARN", "Interrupted")
        return 130

    if output is not None:
        print(output, flush=True)
    else:
        log("SUCCESS", f"{args.verb} {args.name}: done")
    return 0
