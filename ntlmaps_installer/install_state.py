# Path and File Name : ntlmaps_installer/install_state.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Records what an install registered on the host so teardown can reverse it exactly

"""
Install State

Persists /var/lib/ntlmaps/install_state.json after registration. Uninstall
reads it to learn the account, install root and firewall port that were
actually used, instead of relying on the environment being repeated.

The record is validated against INSTALL_STATE_SCHEMA on both write and read.
"""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema

from .errors import InstallStateError
from .parameters import InstallParameters

logger = logging.getLogger(__name__)

STATE_FILE_NAME = "install_state.json"

INSTALL_STATE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": [
        "service_name", "user", "group", "home", "port",
        "firewall_rule_added", "unit_sha256", "logrotate_sha256",
        "installed_at", "installer_version",
    ],
    "properties": {
        "service_name": {"type": "string", "minLength": 1},
        "user": {"type": "string", "minLength": 1},
        "group": {"type": "string", "minLength": 1},
        "home": {"type": "string", "pattern": "^/"},
        "port": {"type": "integer", "minimum": 1, "maximum": 65535},
        "firewall_rule_added": {"type": "boolean"},
        "unit_sha256": {"type": "string", "pattern": "^[0-9a-f]{64}$"},
        "logrotate_sha256": {"type": "string", "pattern": "^[0-9a-f]{64}$"},
        "installed_at": {"type": "string"},
        "installer_version": {"type": "string"},
    },
    "additionalProperties": False,
}


class InstallStateStore:
    """Reads and writes the install state record."""

    def __init__(self, state_dir: Path = Path("/var/lib/ntlmaps")):
        self.state_dir = Path(state_dir)
        self.state_path = self.state_dir / STATE_FILE_NAME

    def create_state(self, params: InstallParameters, firewall_rule_added: bool,
                     unit_sha256: str, logrotate_sha256: str, version: str) -> Dict[str, Any]:
        return {
            "service_name": params.service_name,
            "user": params.user,
            "group": params.group,
            "home": str(params.home),
            "port": params.port,
            "firewall_rule_added": firewall_rule_added,
            "unit_sha256": unit_sha256,
            "logrotate_sha256": logrotate_sha256,
            "installed_at": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "installer_version": version,
        }

    def save_state(self, state: Dict[str, Any]) -> Path:
        """
        Validate and atomically write the record (root-owned, 0644).

        Raises:
            InstallStateError: If the record is invalid or cannot be written
        """
        try:
            jsonschema.validate(instance=state, schema=INSTALL_STATE_SCHEMA)
        except jsonschema.ValidationError as e:
            raise InstallStateError(f"Install state failed validation: {e.message}")

        tmp_path = self.state_path.with_suffix(".json.tmp")
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w') as f:
                json.dump(state, f, indent=2, sort_keys=True)
                f.write("\n")
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, self.state_path)
        except OSError as e:
            raise InstallStateError(f"Failed to write install state {self.state_path}: {e}") from e

        return self.state_path

    def load_state(self) -> Optional[Dict[str, Any]]:
        """
        Load the record.

        Returns:
            The validated record, or None if no install state exists

        Raises:
            InstallStateError: If the file exists but is corrupted or invalid
        """
        try:
            with open(self.state_path, 'r') as f:
                state = json.load(f)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as e:
            raise InstallStateError(f"Install state is corrupted: {e}")
        except OSError as e:
            raise InstallStateError(f"Failed to read install state {self.state_path}: {e}") from e

        try:
            jsonschema.validate(instance=state, schema=INSTALL_STATE_SCHEMA)
        except jsonschema.ValidationError as e:
            raise InstallStateError(f"Install state failed validation: {e.message}")

        return state

    def remove_state(self) -> bool:
        """Remove the record. Returns False if it was already absent."""
        try:
            self.state_path.unlink()
        except FileNotFoundError:
            return False
        try:
            self.state_dir.rmdir()
        except OSError:
            # directory still holds something not ours
            pass
        return True


def parameters_from_state(state: Dict[str, Any], fallback: InstallParameters) -> InstallParameters:
    """Overlay the recorded account, install root and port on the environment parameters."""
    return InstallParameters(
        user=state["user"],
        group=state["group"],
        home=Path(state["home"]),
        port=state["port"],
        parent_proxy=fallback.parent_proxy,
        parent_proxy_port=fallback.parent_proxy_port,
        nt_domain=fallback.nt_domain,
        service_name=state["service_name"],
        config_file=fallback.config_file,
    )
