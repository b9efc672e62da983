# Path and File Name : ntlmaps_installer/services/logrotate_writer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Writes the logrotate policy for the NTLMAPS log directory

"""
Logrotate Writer: installs /etc/logrotate.d/<service>.

The postrotate hook asks systemd to reload-or-restart the service and
ignores failure, so rotation still succeeds while the service is stopped.
"""

import logging
import os
from pathlib import Path

from ..errors import ResourceCreationError

logger = logging.getLogger(__name__)


class LogrotateWriter:
    """Writes the rotation policy file."""

    def __init__(self, policy_dir: Path = Path("/etc/logrotate.d"),
                 cadence: str = "daily", policy_mode: int = 0o644):
        self.policy_dir = Path(policy_dir)
        self.cadence = cadence
        self.policy_mode = policy_mode

    def policy_path(self, name: str) -> Path:
        return self.policy_dir / name

    def generate_policy(self, name: str, log_glob: str, retention: int) -> str:
        return f"""{log_glob} {{
    {self.cadence}
    missingok
    rotate {retention}
    compress
    delaycompress
    notifempty
    sharedscripts
    postrotate
        systemctl reload-or-restart {name}.service > /dev/null 2>&1 || true
    endscript
}}
"""

    def register_rotation(self, name: str, log_glob: str, retention: int) -> Path:
        """
        Write the rotation policy, overwriting any previous one.

        Args:
            name: Service name (also the policy file name)
            log_glob: Glob of log files, e.g. /opt/ntlmaps/logs/*.log
            retention: Number of rotated files to keep

        Returns:
            Path to the policy file

        Raises:
            ResourceCreationError: If the file cannot be written
        """
        logger.info("Setting up log rotation")
        policy_file = self.policy_path(name)

        try:
            self.policy_dir.mkdir(parents=True, exist_ok=True)
            with open(policy_file, 'w') as f:
                f.write(self.generate_policy(name, log_glob, retention))
            os.chmod(policy_file, self.policy_mode)
        except OSError as e:
            raise ResourceCreationError(f"Failed to write logrotate policy {policy_file}: {e}") from e

        logger.info("Created log rotation configuration")
        return policy_file

    def remove_rotation(self, name: str) -> bool:
        """Remove the policy file. Returns False if it was already absent."""
        try:
            self.policy_path(name).unlink()
            return True
        except FileNotFoundError:
            return False
