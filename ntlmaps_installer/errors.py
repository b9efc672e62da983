# Path and File Name : ntlmaps_installer/errors.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Installer error taxonomy - every fatal condition maps to one of these types

"""
NTLMAPS Installer Errors

All fatal conditions raised by installer components derive from InstallerError.
The CLI entry point is the only place that converts them into exit codes.
"""

from typing import Optional, Sequence


class InstallerError(Exception):
    """Base class for all fatal installer errors."""
    pass


class InsufficientPrivilegeError(InstallerError):
    """Raised when the installer is not running with root privileges."""
    pass


class MissingSourceError(InstallerError):
    """Raised when the NTLMAPS program files are absent from the source directory."""
    pass


class ResourceCreationError(InstallerError):
    """Raised when an identity, filesystem or service manager mutation fails."""
    pass


class CommandError(ResourceCreationError):
    """Raised when an external command exits non-zero."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str = "",
                 stdout: str = ""):
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr
        self.stdout = stdout
        detail = stderr.strip() or stdout.strip()
        message = f"Command '{' '.join(self.args_list)}' failed with exit code {returncode}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ActivationError(InstallerError):
    """Raised when the service did not reach the active state after start."""

    def __init__(self, message: str, diagnostics: Optional[str] = None):
        super().__init__(message)
        self.diagnostics = diagnostics


class UnknownOptionError(InstallerError):
    """Raised for unrecognized command line arguments."""
    pass


class ParameterError(InstallerError):
    """Raised when an environment-supplied install parameter is invalid."""
    pass


class InstallLockError(InstallerError):
    """Raised when another installer run holds the host-wide install lock."""
    pass


class ProfileError(InstallerError):
    """Raised when the packaged install profile is missing or invalid."""
    pass


class InstallStateError(InstallerError):
    """Raised when the install state record cannot be written or is malformed."""
    pass
