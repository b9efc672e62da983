# Path and File Name : ntlmaps_installer/system/firewall.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: firewalld interface - detects absent/inactive/active firewall and manages TCP port rules

"""
Firewall: narrow interface to firewalld via firewall-cmd.

detect() returns the firewall's state so callers branch on a value instead of
probing for the binary themselves.
"""

from enum import Enum

from .command_runner import CommandRunner


class FirewallState(Enum):
    """firewalld availability."""
    ABSENT = "absent"      # firewall-cmd not installed
    INACTIVE = "inactive"  # installed but not running
    ACTIVE = "active"


class Firewalld:
    """firewall-cmd wrapper."""

    BINARY = 'firewall-cmd'

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def detect(self) -> FirewallState:
        if self.runner.which(self.BINARY) is None:
            return FirewallState.ABSENT
        if not self.runner.succeeds([self.BINARY, '--state']):
            return FirewallState.INACTIVE
        return FirewallState.ACTIVE

    def add_port(self, port: int) -> None:
        self.runner.run_checked([self.BINARY, '--permanent', f'--add-port={port}/tcp'])

    def remove_port(self, port: int) -> bool:
        """Remove a permanent TCP rule. Returns False if the rule was not present."""
        return self.runner.succeeds([self.BINARY, '--permanent', f'--remove-port={port}/tcp'])

    def reload(self) -> None:
        self.runner.run_checked([self.BINARY, '--reload'])
