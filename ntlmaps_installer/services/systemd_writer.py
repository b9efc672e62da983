# Path and File Name : ntlmaps_installer/services/systemd_writer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Writes the hardened NTLMAPS systemd unit and reloads the systemd unit cache

"""
Systemd Writer: renders and installs ntlmaps.service.

Fixed policy:
- Restart=always with a bounded RestartSec
- NoNewPrivileges, PrivateTmp, ProtectSystem=strict, ProtectHome
- Writable only within the install root (ReadWritePaths)
- Only CAP_NET_BIND_SERVICE, for listen ports below 1024

One unit per install; always overwritten, then daemon-reload.
"""

import hashlib
import logging
import os
from pathlib import Path
from typing import Sequence

from ..errors import CommandError, ResourceCreationError
from ..parameters import InstallParameters
from ..system.service_manager import SystemdServiceManager

logger = logging.getLogger(__name__)


class SystemdWriter:
    """Writes the NTLMAPS systemd service unit."""

    def __init__(self, service_manager: SystemdServiceManager,
                 unit_dir: Path = Path("/etc/systemd/system"),
                 description: str = "NTLM Authorization Proxy Server",
                 documentation: str = "https://github.com/ntlmaps/ntlmaps",
                 python: str = "/usr/bin/python3",
                 restart: str = "always",
                 restart_sec: int = 10,
                 capabilities: Sequence[str] = ("CAP_NET_BIND_SERVICE",),
                 unit_mode: int = 0o644):
        self.service_manager = service_manager
        self.unit_dir = Path(unit_dir)
        self.description = description
        self.documentation = documentation
        self.python = python
        self.restart = restart
        self.restart_sec = restart_sec
        self.capabilities = tuple(capabilities)
        self.unit_mode = unit_mode

    def unit_path(self, params: InstallParameters) -> Path:
        return self.unit_dir / params.unit_name

    def generate_unit(self, params: InstallParameters, entry_point: str = "main.py") -> str:
        """
        Generate systemd service unit content.

        Args:
            params: Install parameters (account, install root)
            entry_point: Program file inside the install root

        Returns:
            Service unit content
        """
        home = params.home
        capabilities = ' '.join(self.capabilities)

        return f"""[Unit]
Description={self.description}
Documentation={self.documentation}
After=network.target
Wants=network.target

[Service]
Type=simple
User={params.user}
Group={params.group}
WorkingDirectory={home}
ExecStart={self.python} {home / entry_point}
Restart={self.restart}
RestartSec={self.restart_sec}
StandardOutput=journal
StandardError=journal

# Security settings
NoNewPrivileges=true
PrivateTmp=true
ProtectSystem=strict
ProtectHome=true
ReadWritePaths={home}
CapabilityBoundingSet={capabilities}
AmbientCapabilities={capabilities}

# Network settings
BindReadOnlyPaths=/etc/resolv.conf

[Install]
WantedBy=multi-user.target
"""

    def register_service(self, params: InstallParameters, entry_point: str = "main.py") -> Path:
        """
        Write the unit file (always overwritten) and reload systemd.

        Returns:
            Path to the installed unit

        Raises:
            ResourceCreationError: If the write or daemon-reload fails
        """
        logger.info("Creating systemd service")
        unit_file = self.unit_path(params)
        content = self.generate_unit(params, entry_point)

        try:
            self.unit_dir.mkdir(parents=True, exist_ok=True)
            with open(unit_file, 'w') as f:
                f.write(content)
            os.chmod(unit_file, self.unit_mode)
        except OSError as e:
            raise ResourceCreationError(f"Failed to write systemd unit {unit_file}: {e}") from e

        try:
            self.service_manager.daemon_reload()
        except CommandError as e:
            raise ResourceCreationError(f"systemctl daemon-reload failed: {e}") from e

        logger.info("Created systemd service")
        return unit_file

    def remove_unit(self, params: InstallParameters) -> bool:
        """Remove the unit file. Returns False if it was already absent."""
        unit_file = self.unit_path(params)
        try:
            unit_file.unlink()
            return True
        except FileNotFoundError:
            return False


def file_sha256(path: Path) -> str:
    """SHA256 of an installed file, recorded in the install state."""
    with open(path, 'rb') as f:
        return hashlib.sha256(f.read()).hexdigest()
