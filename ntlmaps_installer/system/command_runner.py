# Path and File Name : ntlmaps_installer/system/command_runner.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Single execution seam for external host commands (useradd, systemctl, firewall-cmd)

"""
Command Runner: executes host commands synchronously and reports their outcome.

Every external command issued by the installer goes through CommandRunner so
that tests can substitute a recording fake.
"""

import logging
import shutil
import subprocess
from typing import Optional, Sequence

from ..errors import CommandError

logger = logging.getLogger(__name__)


class CommandRunner:
    """Runs host commands with captured output."""

    def run(self, args: Sequence[str]) -> subprocess.CompletedProcess:
        """
        Run a command and return its result without raising on failure.

        A missing executable is reported as return code 127, the way a shell would.
        """
        logger.debug("Running: %s", ' '.join(args))
        try:
            return subprocess.run(
                list(args),
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            return subprocess.CompletedProcess(list(args), 127, stdout="", stderr=str(e))

    def run_checked(self, args: Sequence[str]) -> subprocess.CompletedProcess:
        """
        Run a command and raise CommandError if it exits non-zero.

        Raises:
            CommandError: If the command fails
        """
        result = self.run(args)
        if result.returncode != 0:
            raise CommandError(args, result.returncode, result.stderr or "", result.stdout or "")
        return result

    def succeeds(self, args: Sequence[str]) -> bool:
        return self.run(args).returncode == 0

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name)
