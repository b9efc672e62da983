# Path and File Name : ntlmaps_installer/runtime/layout.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Creates the NTLMAPS install tree with service-account ownership and fixed root mode

"""
Runtime Layout: creates the install tree.

Canonical layout:
/opt/ntlmaps/
  lib/          - NTLMAPS library modules
  logs/         - Proxy logs (rotated by logrotate)
  main.py       - Program entry point (installed by RuntimeDeployer)
  server.cfg    - Configuration (written by ConfigWriter, mode 0600)
"""

import grp
import logging
import os
import pwd
from pathlib import Path
from typing import Callable, Iterable, List

from ..accounts.account_provisioner import ServiceAccount
from ..errors import ResourceCreationError

logger = logging.getLogger(__name__)

ChownFn = Callable[..., None]


def lchown(path: Path, user: str, group: str) -> None:
    """
    chown by name without following a symlink at path.

    Raises:
        LookupError: If the user or group does not exist
        OSError: If the chown fails
    """
    uid = pwd.getpwnam(user).pw_uid
    gid = grp.getgrnam(group).gr_gid
    os.chown(path, uid, gid, follow_symlinks=False)


def chown_tree(root: Path, owner: ServiceAccount, chown: ChownFn = lchown) -> None:
    """
    Recursively set ownership of root and everything beneath it.

    Symlinks are skipped, never followed.

    Raises:
        OSError: If any chown fails (callers translate to ResourceCreationError)
    """
    chown(root, owner.name, owner.group)
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            path = Path(dirpath) / name
            if path.is_symlink():
                continue
            chown(path, owner.name, owner.group)


class RuntimeLayout:
    """Creates the install root and its subdirectories."""

    def __init__(self, root_mode: int = 0o755, chown: ChownFn = lchown):
        self.root_mode = root_mode
        self._chown = chown

    def ensure_tree(self, root: Path, subpaths: Iterable[str], owner: ServiceAccount) -> List[Path]:
        """
        Create root and each subpath (no error if present), chown recursively, chmod root.

        MUST run after AccountProvisioner - the ownership target must exist.

        Args:
            root: Install root
            subpaths: Subdirectory names relative to root
            owner: Service account that owns the tree

        Returns:
            List of directories in the tree (root first)

        Raises:
            ResourceCreationError: On any filesystem error
        """
        logger.info("Creating directories")
        root = Path(root)
        created = [root]

        try:
            root.mkdir(parents=True, exist_ok=True)
            for sub in subpaths:
                dir_path = root / sub
                if dir_path.is_symlink():
                    logger.warning(f"Replacing symlink {dir_path} with a directory")
                    dir_path.unlink()
                dir_path.mkdir(parents=True, exist_ok=True)
                created.append(dir_path)
        except OSError as e:
            raise ResourceCreationError(f"Failed to create install tree under {root}: {e}") from e

        try:
            chown_tree(root, owner, self._chown)
        except (OSError, LookupError) as e:
            raise ResourceCreationError(f"Failed to set ownership on {root}: {e}") from e

        try:
            os.chmod(root, self.root_mode)
        except OSError as e:
            raise ResourceCreationError(f"Failed to set permissions on {root}: {e}") from e

        logger.info(f"Created directory structure at {root}")
        return created
