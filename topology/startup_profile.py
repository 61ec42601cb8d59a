from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class StartupProfile:
    host: str
    port: int
    cert_file: str
    key_file: str


def _require_valid_port(port: int, field_name: str = "port") -> None:
    if int(port) < 1 or int(port) > 65535:
        raise ValueError(f"{field_name} must be in range 1..65535")


def _require_non_empty_host(host: str) -> None:
    if not str(host or "").strip():
        raise ValueError("host is required")


def _require_readable_file(path: str, field_name: str) -> None:
    if not str(path or "").strip():
        raise ValueError(f"{field_name} is required")
    if not Path(path).is_file():
        raise ValueError(f"{field_name} {path} does not exist")


def validate_topology_profile(profile: StartupProfile) -> None:
    _require_non_empty_host(profile.host)
    _require_valid_port(profile.port)
    if not str(profile.cert_file or "").strip() or not str(profile.key_file or "").strip():
        raise ValueError(
            f"One or more TLS certificates not supplied: CertFile: {profile.cert_file}, KeyFile: {profile.key_file}"
        )
    _require_readable_file(profile.cert_file, "cert_file")
    _require_readable_file(profile.key_file, "key_file")
