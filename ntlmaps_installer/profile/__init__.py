# Path and File Name : ntlmaps_installer/profile/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Loads and validates the packaged install profile (fixed install policy)

"""
Install Profile: fixed installation policy shipped with the installer.

The profile is read from install_profile.yaml next to this module and
validated against PROFILE_SCHEMA. Any deviation aborts (fail-closed).
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import jsonschema
import yaml

from ..errors import ProfileError

PROFILE_PATH = Path(__file__).parent / "install_profile.yaml"

_MODE_PATTERN = "^0[0-7]{3}$"

PROFILE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": [
        "version", "service_name", "defaults", "account", "layout",
        "artifacts", "system_paths", "service", "logrotate", "activation",
    ],
    "properties": {
        "version": {"type": "string"},
        "service_name": {"type": "string", "pattern": "^[a-z][a-z0-9_-]*$"},
        "defaults": {
            "type": "object",
            "required": [
                "NTLM_USER", "NTLM_GROUP", "NTLM_HOME", "NTLM_PORT",
                "PARENT_PROXY", "PARENT_PROXY_PORT", "NT_DOMAIN",
            ],
        },
        "account": {
            "type": "object",
            "required": ["shell", "comment"],
            "properties": {
                "shell": {"type": "string"},
                "comment": {"type": "string"},
            },
        },
        "layout": {
            "type": "object",
            "required": [
                "subdirectories", "root_mode", "config_file",
                "config_mode", "program_file_mode",
            ],
            "properties": {
                "subdirectories": {"type": "array", "items": {"type": "string"}, "minItems": 1},
                "root_mode": {"type": "string", "pattern": _MODE_PATTERN},
                "config_file": {"type": "string"},
                "config_mode": {"type": "string", "pattern": _MODE_PATTERN},
                "program_file_mode": {"type": "string", "pattern": _MODE_PATTERN},
            },
        },
        "artifacts": {
            "type": "object",
            "required": ["entry_point", "library_dir"],
        },
        "system_paths": {
            "type": "object",
            "required": ["systemd_unit_dir", "logrotate_dir", "state_dir", "lock_file"],
        },
        "service": {
            "type": "object",
            "required": [
                "description", "documentation", "python", "restart",
                "restart_sec", "capabilities", "unit_mode",
            ],
            "properties": {
                "restart_sec": {"type": "integer", "minimum": 1},
                "capabilities": {"type": "array", "items": {"type": "string"}},
                "unit_mode": {"type": "string", "pattern": _MODE_PATTERN},
            },
        },
        "logrotate": {
            "type": "object",
            "required": ["cadence", "rotate", "log_glob", "policy_mode"],
            "properties": {
                "cadence": {"enum": ["daily", "weekly", "monthly"]},
                "rotate": {"type": "integer", "minimum": 1},
                "policy_mode": {"type": "string", "pattern": _MODE_PATTERN},
            },
        },
        "activation": {
            "type": "object",
            "required": ["grace_seconds"],
            "properties": {
                "grace_seconds": {"type": "number", "minimum": 0},
            },
        },
    },
}


@dataclass(frozen=True)
class InstallProfile:
    """Typed view of install_profile.yaml."""
    version: str
    service_name: str
    defaults: Dict[str, str]
    account_shell: str
    account_comment: str
    subdirectories: Tuple[str, ...]
    root_mode: int
    config_file: str
    config_mode: int
    program_file_mode: int
    entry_point: str
    library_dir: str
    systemd_unit_dir: Path
    logrotate_dir: Path
    state_dir: Path
    lock_file: Path
    service_description: str
    service_documentation: str
    python: str
    restart: str
    restart_sec: int
    capabilities: Tuple[str, ...]
    unit_mode: int
    rotation_cadence: str
    rotation_count: int
    log_glob: str
    policy_mode: int
    grace_seconds: float


def _mode(value: str) -> int:
    return int(value, 8)


def load_profile(path: Optional[Path] = None) -> InstallProfile:
    """
    Load and validate the install profile.

    Args:
        path: Profile location (default: packaged install_profile.yaml)

    Returns:
        InstallProfile instance

    Raises:
        ProfileError: If the profile is missing, unparsable or fails schema validation
    """
    profile_path = Path(path) if path is not None else PROFILE_PATH

    try:
        with open(profile_path, 'r') as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ProfileError(f"Install profile not readable: {profile_path}: {e}")
    except yaml.YAMLError as e:
        raise ProfileError(f"Install profile is not valid YAML: {profile_path}: {e}")

    try:
        jsonschema.validate(instance=raw, schema=PROFILE_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ProfileError(f"Install profile failed validation: {e.message}")

    layout = raw['layout']
    paths = raw['system_paths']
    service = raw['service']
    rotation = raw['logrotate']
    subdirectories: List[str] = layout['subdirectories']

    return InstallProfile(
        version=raw['version'],
        service_name=raw['service_name'],
        defaults={k: str(v) for k, v in raw['defaults'].items()},
        account_shell=raw['account']['shell'],
        account_comment=raw['account']['comment'],
        subdirectories=tuple(subdirectories),
        root_mode=_mode(layout['root_mode']),
        config_file=layout['config_file'],
        config_mode=_mode(layout['config_mode']),
        program_file_mode=_mode(layout['program_file_mode']),
        entry_point=raw['artifacts']['entry_point'],
        library_dir=raw['artifacts']['library_dir'],
        systemd_unit_dir=Path(paths['systemd_unit_dir']),
        logrotate_dir=Path(paths['logrotate_dir']),
        state_dir=Path(paths['state_dir']),
        lock_file=Path(paths['lock_file']),
        service_description=service['description'],
        service_documentation=service['documentation'],
        python=service['python'],
        restart=service['restart'],
        restart_sec=int(service['restart_sec']),
        capabilities=tuple(service['capabilities']),
        unit_mode=_mode(service['unit_mode']),
        rotation_cadence=rotation['cadence'],
        rotation_count=int(rotation['rotate']),
        log_glob=rotation['log_glob'],
        policy_mode=_mode(rotation['policy_mode']),
        grace_seconds=float(raw['activation']['grace_seconds']),
    )


__all__ = ['InstallProfile', 'load_profile', 'PROFILE_PATH', 'PROFILE_SCHEMA']
