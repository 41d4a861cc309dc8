"""Configuration loading and option parsing for the OpenNebula machine driver."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Mapping, Optional, Union

try:
    import yaml  # type: ignore
except ImportError as exc:  # pragma: no cover
    raise SystemExit("PyYAML is required but not installed") from exc

from onedriver.constants import (
    AUTH_ENV,
    CONFIG_ENV,
    CONFIG_SECTION,
    DEFAULT_AUTH_PATH,
    DEFAULT_STORAGE_PATH,
    DEFAULT_XMLRPC_ENDPOINT,
    DRIVER_OPTIONS,
    OPTION_PREFIX,
    STORAGE_PATH_ENV,
    XMLRPC_ENV,
)
from onedriver.exceptions import ConfigurationError
from onedriver.models import DriverConfig
from onedriver.utils import get_env, log


def load_config_file(config_path: Path) -> Dict[str, str]:
    """Read driver option defaults from the ``opennebula:`` section of a YAML file."""
    if not config_path.exists():
        raise ConfigurationError(f"Driver config missing: {config_path}")
    try:
        data = yaml.safe_load(config_path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc
    section = data.get(CONFIG_SECTION, {}) if isinstance(data, dict) else None
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{CONFIG_SECTION}' in {config_path} must be a mapping")
    options = {}
    for key, value in section.items():
        name = OPTION_PREFIX + str(key).replace("_", "-")
        options[name] = "" if value is None else str(value)
    return options


def load_session(auth_path: Path) -> str:
    """Return the ``user:password`` session string stored in ``auth_path``."""
    path = auth_path.expanduser()
    try:
        session = path.read_text().strip()
    except OSError as exc:
        raise ConfigurationError(f"Cannot read OpenNebula credentials from {path}: {exc}") from exc
    if ":" not in session:
        raise ConfigurationError(f"OpenNebula credentials in {path} must be 'username:password'")
    return session


def parse_int_value(name: str, raw: str, min_val: int = 1) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer (got '{raw}')")
    if value < min_val:
        raise ConfigurationError(f"{name} must be >= {min_val} (got {value})")
    return value


def parse_cpu(raw: str) -> str:
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"opennebula-cpu must be a number (got '{raw}')")
    if value <= 0:
        raise ConfigurationError(f"opennebula-cpu must be > 0 (got '{raw}')")
    return raw.strip()


def parse_datastore_id(raw: Union[str, int]) -> int:
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise ConfigurationError(f"Datastore ID must be a non-negative integer (got '{raw}')")
    if value < 0:
        raise ConfigurationError(f"Datastore ID must be a non-negative integer (got '{raw}')")
    return value


def validate_network(network_name: str, network_id: str) -> None:
    if not network_name and not network_id:
        raise ConfigurationError(
            "Please specify a network to connect to with --opennebula-network-name or --opennebula-network-id."
        )
    if network_name and network_id:
        raise ConfigurationError(
            "Please specify a network to connect to either with --opennebula-network-name "
            "or --opennebula-network-id, not both."
        )


def resolve_options(
    overrides: Optional[Mapping[str, Optional[str]]] = None,
    config_path: Optional[Path] = None,
) -> Dict[str, str]:
    """Merge option values: explicit override > environment > YAML file > default."""
    overrides = overrides or {}
    if config_path is None:
        env_path = get_env(CONFIG_ENV)
        config_path = Path(env_path) if env_path else None
    from_file = load_config_file(config_path) if config_path is not None else {}

    values: Dict[str, str] = {}
    for option in DRIVER_OPTIONS:
        explicit = overrides.get(option.name)
        if explicit is not None:
            values[option.name] = explicit
            continue
        env_value = get_env(option.env)
        if env_value is not None:
            values[option.name] = env_value
        elif option.name in from_file:
            values[option.name] = from_file[option.name]
        else:
            values[option.name] = option.default
    unknown = set(from_file) - set(values)
    if unknown:
        log("WARN", f"Ignoring unknown options in {config_path}: {', '.join(sorted(unknown))}")
    return values


def parse_env(
    machine_name: str,
    overrides: Optional[Mapping[str, Optional[str]]] = None,
    config_path: Optional[Path] = None,
    store_path: Optional[Path] = None,
    creating: bool = False,
) -> DriverConfig:
    if not machine_name:
        raise ConfigurationError("A machine name is required")
    values = resolve_options(overrides, config_path)

    network_name = values["opennebula-network-name"].strip()
    network_id = values["opennebula-network-id"].strip()
    if creating:
        validate_network(network_name, network_id)

    vcpu_raw = values["opennebula-vcpu"].strip()
    vcpu = parse_int_value("opennebula-vcpu", vcpu_raw) if vcpu_raw else None

    if store_path is None:
        store_path = Path(get_env(STORAGE_PATH_ENV) or DEFAULT_STORAGE_PATH)

    return DriverConfig(
        machine_name=machine_name,
        store_path=store_path.expanduser(),
        ssh_user=values["opennebula-ssh-user"].strip(),
        cpu=parse_cpu(values["opennebula-cpu"]),
        vcpu=vcpu,
        memory_mb=parse_int_value("opennebula-memory", values["opennebula-memory"]),
        disk_size_mb=parse_int_value("opennebula-disk-size", values["opennebula-disk-size"]),
        network_name=network_name,
        network_owner=values["opennebula-network-owner"].strip(),
        network_id=network_id,
        datastore_id=parse_datastore_id(values["opennebula-datastore-id"]),
        boot2docker_url=values["opennebula-boot2docker-url"].strip(),
        endpoint=get_env(XMLRPC_ENV) or DEFAULT_XMLRPC_ENDPOINT,
        auth_path=Path(get_env(AUTH_ENV) or DEFAULT_AUTH_PATH),
    )
