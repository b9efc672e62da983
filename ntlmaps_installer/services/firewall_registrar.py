# Path and File Name : ntlmaps_installer/services/firewall_registrar.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Opportunistically opens/closes the NTLMAPS listen port in firewalld

"""
Firewall Registrar: optional step.

Absent or inactive firewalld degrades to a warning, never an error.
Only an active firewall can make this step fail.
"""

import logging

from ..errors import CommandError, ResourceCreationError
from ..system.firewall import Firewalld, FirewallState

logger = logging.getLogger(__name__)


class FirewallRegistrar:
    """Manages the single permanent TCP allow rule."""

    def __init__(self, firewall: Firewalld):
        self.firewall = firewall

    def open_port(self, port: int) -> bool:
        """
        Add a permanent TCP allow rule for port and reload firewalld.

        Returns:
            True if the rule was added, False if firewalld is absent or inactive

        Raises:
            ResourceCreationError: If the firewall is active and the rule or reload fails
        """
        state = self.firewall.detect()
        if state is FirewallState.ABSENT:
            logger.warning("Firewalld not found, skipping firewall setup")
            return False
        if state is FirewallState.INACTIVE:
            logger.warning("Firewalld is not running")
            return False

        logger.info("Setting up firewall rules")
        try:
            self.firewall.add_port(port)
            self.firewall.reload()
        except CommandError as e:
            raise ResourceCreationError(f"Failed to open port {port}/tcp in firewalld: {e}") from e

        logger.info(f"Added firewall rule for port {port}")
        return True

    def close_port(self, port: int) -> bool:
        """
        Remove the rule if firewalld is active. A rule that is already gone is not an error.

        Returns:
            True if a rule was removed

        Raises:
            ResourceCreationError: If firewalld is active and reload fails
        """
        if self.firewall.detect() is not FirewallState.ACTIVE:
            return False

        removed = self.firewall.remove_port(port)
        if not removed:
            logger.info(f"No firewall rule for port {port}/tcp")
        try:
            self.firewall.reload()
        except CommandError as e:
            raise ResourceCreationError(f"firewall-cmd --reload failed: {e}") from e
        return removed
