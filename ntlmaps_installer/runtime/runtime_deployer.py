# Path and File Name : ntlmaps_installer/runtime/runtime_deployer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Installs the externally supplied NTLMAPS program files into the install tree

"""
Runtime Deployer: copies NTLMAPS program files (main.py and lib/) into the install root.

The source directory is the one precondition the installer cannot repair:
if it does not contain the program files, deployment fails with
MissingSourceError before anything on the host is touched.

Idempotent by replacement: any prior copy is removed first, never written through.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import List

from ..accounts.account_provisioner import ServiceAccount
from ..errors import MissingSourceError, ResourceCreationError
from .layout import ChownFn, chown_tree, lchown

logger = logging.getLogger(__name__)

_IGNORE = shutil.ignore_patterns('__pycache__', '*.pyc', '.git')


class RuntimeDeployer:
    """Deploys NTLMAPS program files."""

    def __init__(self, entry_point: str = "main.py", library_dir: str = "lib",
                 file_mode: int = 0o644, chown: ChownFn = lchown):
        self.entry_point = entry_point
        self.library_dir = library_dir
        self.file_mode = file_mode
        self._chown = chown

    def check_sources(self, source_dir: Path) -> None:
        """
        Verify the program files are present.

        Raises:
            MissingSourceError: If main.py or lib/ is missing from source_dir
        """
        source_dir = Path(source_dir)
        if not (source_dir / self.library_dir).is_dir() or not (source_dir / self.entry_point).is_file():
            raise MissingSourceError(
                f"NTLMAPS source files not found in {source_dir}. "
                f"Expected {self.entry_point} and {self.library_dir}/. "
                "Run the installer from the ntlmaps directory or pass --source."
            )

    def install_artifacts(self, source_dir: Path, dest_root: Path, owner: ServiceAccount) -> List[Path]:
        """
        Copy program files into dest_root and fix ownership and permissions.

        Args:
            source_dir: Directory holding main.py and lib/
            dest_root: Install root (must already exist)
            owner: Service account that owns the installed files

        Returns:
            List of installed top-level paths

        Raises:
            MissingSourceError: If the source files are absent
            ResourceCreationError: If copying, chown or chmod fails
        """
        self.check_sources(source_dir)
        logger.info("Installing NTLMAPS files")

        source_dir = Path(source_dir)
        dest_root = Path(dest_root)
        dest_lib = dest_root / self.library_dir
        installed: List[Path] = []

        try:
            _clear_target(dest_lib)
            dest_lib.mkdir(parents=True, exist_ok=True)
            for entry in sorted((source_dir / self.library_dir).iterdir()):
                if entry.name == '__pycache__':
                    continue
                target = dest_lib / entry.name
                _clear_target(target)
                if entry.is_dir():
                    shutil.copytree(entry, target, ignore=_IGNORE)
                else:
                    shutil.copy2(entry, target)
                installed.append(target)

            entry_target = dest_root / self.entry_point
            _clear_target(entry_target)
            shutil.copy2(source_dir / self.entry_point, entry_target)
            installed.append(entry_target)
        except (OSError, shutil.Error) as e:
            raise ResourceCreationError(f"Failed to copy NTLMAPS files into {dest_root}: {e}") from e

        try:
            chown_tree(dest_root, owner, self._chown)
        except (OSError, LookupError) as e:
            raise ResourceCreationError(f"Failed to set ownership on {dest_root}: {e}") from e

        try:
            for directory in (dest_root, dest_lib):
                for py_file in directory.glob('*.py'):
                    if py_file.is_symlink():
                        continue
                    os.chmod(py_file, self.file_mode)
        except OSError as e:
            raise ResourceCreationError(f"Failed to set permissions on NTLMAPS files: {e}") from e

        logger.info("Installed NTLMAPS files")
        return installed


def _clear_target(path: Path) -> None:
    """Remove whatever occupies path without following a symlink there."""
    if path.is_symlink():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)
    elif path.exists():
        path.unlink()
