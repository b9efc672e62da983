# Path and File Name : ntlmaps_installer/services/activator.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Enables and starts the NTLMAPS service, then verifies it is active after a grace interval

"""
Service Activator: enable, start, wait, verify.

A failed activation performs NO rollback: everything installed before it
stays on disk for operator inspection, and a rerun is the recovery path.
"""

import logging
import time
from typing import Callable

from ..errors import ActivationError, CommandError, ResourceCreationError
from ..system.service_manager import SystemdServiceManager

logger = logging.getLogger(__name__)


class ServiceActivator:
    """Activates the registered service."""

    def __init__(self, service_manager: SystemdServiceManager, grace_seconds: float = 2,
                 sleep: Callable[[float], None] = time.sleep):
        self.service_manager = service_manager
        self.grace_seconds = grace_seconds
        self._sleep = sleep

    def activate(self, unit: str) -> None:
        """
        Raises:
            ResourceCreationError: If enable or start fails
            ActivationError: If the unit is not active after the grace interval
        """
        logger.info("Enabling and starting service")
        try:
            self.service_manager.enable(unit)
            self.service_manager.start(unit)
        except CommandError as e:
            raise ResourceCreationError(f"Failed to enable/start {unit}: {e}") from e

        self._sleep(self.grace_seconds)

        if self.service_manager.is_active(unit):
            logger.info(f"Service {unit} is running")
            return

        diagnostics = self.service_manager.status(unit)
        logger.error(f"Service {unit} failed to start")
        if diagnostics:
            logger.error(diagnostics.rstrip())
        raise ActivationError(f"Service {unit} failed to start", diagnostics=diagnostics)
