# Path and File Name : ntlmaps_installer/system/privilege.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Root privilege gate - must pass before any install or uninstall mutation

"""
Privilege Guard: verifies the installer runs as root.
"""

import os
from typing import Callable, Optional

from ..errors import InsufficientPrivilegeError


class PrivilegeGuard:
    """Gate for all mutating installer steps."""

    def __init__(self, geteuid: Optional[Callable[[], int]] = None):
        self._geteuid = geteuid

    def is_root(self) -> bool:
        geteuid = self._geteuid if self._geteuid is not None else os.geteuid
        return geteuid() == 0

    def require_root(self) -> None:
        """
        Raises:
            InsufficientPrivilegeError: If the effective UID is not 0
        """
        if not self.is_root():
            raise InsufficientPrivilegeError("This installer must be run as root")
