"""
Topology service configuration.

Values come from an optional YAML file and from environment variables;
the environment wins. The file is the one watched for hot reload.
"""

import os
import threading
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "/etc/config/karavi-topology.yaml"
DEFAULT_CERT_FILE = "/certs/localhost.crt"
DEFAULT_KEY_FILE = "/certs/localhost.key"
DEFAULT_PORT = 443
DEFAULT_ZIPKIN_SERVICE_NAME = "karavi-topology"
# PowerFlex reports "StorageSystem"; PowerStore reports the array under "arrayID".
DEFAULT_STORAGE_SYSTEM_KEYS: Tuple[str, ...] = ("StorageSystem", "arrayID")


def _load_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Load the YAML config file, expanding ${ENV_VAR} references."""
    raw = Path(path).read_text()
    data = yaml.safe_load(os.path.expandvars(raw)) or {}
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a mapping")
    return {str(key).upper(): value for key, value in data.items()}


def _str_env(name: str, file_values: Dict[str, Any], default: Any = "") -> Any:
    env_value = os.getenv(name)
    if env_value is not None and env_value.strip():
        return env_value.strip()
    value = file_values.get(name)
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    return value


def _int_env(name: str, file_values: Dict[str, Any], default: int) -> int:
    raw = str(_str_env(name, file_values, default)).strip()
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid {name} value '{raw}'; using default {default}")
        return default


def _float_env(name: str, file_values: Dict[str, Any], default: float) -> float:
    raw = str(_str_env(name, file_values, default)).strip()
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid {name} value '{raw}'; using default {default}")
        return default


def _bool_env(name: str, file_values: Dict[str, Any], default: bool) -> bool:
    raw = _str_env(name, file_values, default)
    if isinstance(raw, bool):
        return raw
    value = str(raw).strip().lower()
    if value in {"1", "true", "t", "yes", "y"}:
        return True
    if value in {"0", "false", "f", "no", "n"}:
        return False
    logger.warning(f"Invalid {name} value '{raw}'; defaulting to {default}")
    return default


def _list_value(raw: Union[str, Iterable[Any], None]) -> Tuple[str, ...]:
    if raw is None:
        return ()
    items = raw.split(",") if isinstance(raw, str) else raw
    return tuple(str(item).strip() for item in items if str(item).strip())


def parse_driver_names(raw: Union[str, Iterable[Any], None]) -> Tuple[str, ...]:
    """Split a comma-separated (or list) provisioner setting into driver names."""
    names = _list_value(raw)
    if not names:
        logger.warning("PROVISIONER_NAMES is empty; no provisioners will be used")
    return names


@dataclass(frozen=True)
class Settings:
    driver_names: Tuple[str, ...] = ()
    log_level: str = "INFO"
    log_format: str = "text"
    port: int = DEFAULT_PORT
    cert_file: str = DEFAULT_CERT_FILE
    key_file: str = DEFAULT_KEY_FILE
    debug: bool = False
    kubeconfig: Optional[str] = None
    storage_system_keys: Tuple[str, ...] = DEFAULT_STORAGE_SYSTEM_KEYS
    zipkin_uri: str = ""
    zipkin_service_name: str = DEFAULT_ZIPKIN_SERVICE_NAME
    zipkin_probability: float = 0.0
    config_file: str = DEFAULT_CONFIG_FILE


def load_settings(config_file: Optional[str] = None) -> Settings:
    """
    Build Settings from the config file and the environment.

    Args:
        config_file: YAML path; TOPOLOGY_CONFIG_FILE or the default when omitted

    Raises:
        ValueError: When the config file exists but is not a YAML mapping
    """
    path = config_file or os.getenv("TOPOLOGY_CONFIG_FILE", DEFAULT_CONFIG_FILE)
    file_values: Dict[str, Any] = {}
    if Path(path).is_file():
        file_values = _load_config_file(path)
    else:
        logger.warning(f"Config file {path} not found; using environment variables only")

    storage_system_keys = _list_value(_str_env("STORAGE_SYSTEM_KEYS", file_values, None))

    return Settings(
        driver_names=parse_driver_names(_str_env("PROVISIONER_NAMES", file_values, None)),
        log_level=str(_str_env("LOG_LEVEL", file_values, "INFO")).upper(),
        log_format=str(_str_env("LOG_FORMAT", file_values, "text")).lower(),
        port=_int_env("PORT", file_values, DEFAULT_PORT),
        cert_file=str(_str_env("TLS_CERT_PATH", file_values, DEFAULT_CERT_FILE)),
        key_file=str(_str_env("TLS_KEY_PATH", file_values, DEFAULT_KEY_FILE)),
        debug=_bool_env("DEBUG", file_values, False),
        kubeconfig=_str_env("KUBECONFIG", file_values, None),
        storage_system_keys=storage_system_keys or DEFAULT_STORAGE_SYSTEM_KEYS,
        zipkin_uri=str(_str_env("ZIPKIN_URI", file_values, "")),
        zipkin_service_name=str(_str_env("ZIPKIN_SERVICE_NAME", file_values, DEFAULT_ZIPKIN_SERVICE_NAME)),
        zipkin_probability=_float_env("ZIPKIN_PROBABILITY", file_values, 0.0),
        config_file=str(path),
    )


class DriverNameSet:
    """
    Ordered set of tracked CSI driver names, replaceable at runtime.

    Readers take a snapshot so one discovery call filters against one list
    even if a reload swaps it mid-call.
    """

    def __init__(self, names: Iterable[str] = ()):
        self._names: Tuple[str, ...] = tuple(names)
        self._lock = threading.Lock()

    def snapshot(self) -> Tuple[str, ...]:
        with self._lock:
            return self._names

    def replace(self, names: Iterable[str]) -> None:
        new_names = tuple(names)
        with self._lock:
            self._names = new_names
        logger.info(f"Tracked driver names updated: {list(new_names)}")
