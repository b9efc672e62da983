# Path and File Name : ntlmaps_installer/install_lock.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Host-wide advisory lock serializing installer runs

"""
Install Lock: prevents two install/uninstall runs from racing on the same host.

A second run fails immediately instead of waiting.
"""

import fcntl
import logging
import os
from pathlib import Path
from typing import Optional

from .errors import InstallLockError

logger = logging.getLogger(__name__)


class InstallLock:
    """Exclusive, non-blocking flock on a lock file."""

    def __init__(self, lock_path: Path = Path("/run/ntlmaps-installer.lock")):
        self.lock_path = Path(lock_path)
        self._fd: Optional[int] = None

    def acquire(self) -> None:
        """
        Raises:
            InstallLockError: If another run holds the lock or the lock file cannot be opened
        """
        try:
            self.lock_path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.lock_path, os.O_RDWR | os.O_CREAT, 0o600)
        except OSError as e:
            raise InstallLockError(f"Cannot open install lock {self.lock_path}: {e}") from e

        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            os.close(fd)
            raise InstallLockError(
                f"Another installer run holds {self.lock_path}. "
                "Wait for it to finish and re-run."
            )

        os.ftruncate(fd, 0)
        os.write(fd, f"{os.getpid()}\n".encode())
        self._fd = fd
        logger.debug(f"Acquired install lock {self.lock_path}")

    def release(self) -> None:
        if self._fd is None:
            return
        fcntl.flock(self._fd, fcntl.LOCK_UN)
        os.close(self._fd)
        self._fd = None

    def __enter__(self) -> 'InstallLock':
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
