# Path and File Name : ntlmaps_installer/parameters.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Resolves immutable install parameters from environment variables with profile defaults

"""
Install Parameters: resolved once at process start, shared read-only by all components.

Environment variables (all optional):
  NTLM_USER, NTLM_GROUP, NTLM_HOME, NTLM_PORT,
  PARENT_PROXY, PARENT_PROXY_PORT, NT_DOMAIN
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .errors import ParameterError
from .profile import InstallProfile, load_profile

ENV_KEYS = (
    'NTLM_USER',
    'NTLM_GROUP',
    'NTLM_HOME',
    'NTLM_PORT',
    'PARENT_PROXY',
    'PARENT_PROXY_PORT',
    'NT_DOMAIN',
)

# useradd/groupadd accept this portable subset
_ACCOUNT_NAME = re.compile(r'^[a-z_][a-z0-9_-]{0,31}$')
_HOSTNAME = re.compile(r'^[A-Za-z0-9.-]+$')
# Lands unquoted in ExecStart=, ReadWritePaths= and the logrotate glob
_HOME_PATH = re.compile(r'^/[A-Za-z0-9._/-]+$')
# Printable ASCII only; server.cfg is an ASCII document
_PRINTABLE = re.compile(r'^[\x20-\x7e]*$')


@dataclass(frozen=True)
class InstallParameters:
    """Per-install settings."""
    user: str
    group: str
    home: Path
    port: int
    parent_proxy: str
    parent_proxy_port: int
    nt_domain: str
    service_name: str = "ntlmaps"
    config_file: str = "server.cfg"

    @property
    def lib_dir(self) -> Path:
        return self.home / "lib"

    @property
    def logs_dir(self) -> Path:
        return self.home / "logs"

    @property
    def config_path(self) -> Path:
        return self.home / self.config_file

    @property
    def unit_name(self) -> str:
        return f"{self.service_name}.service"


def _parse_port(key: str, value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise ParameterError(f"{key} must be an integer, got '{value}'")
    if port < 1 or port > 65535:
        raise ParameterError(f"{key} must be between 1 and 65535, got {port}")
    return port


def resolve_parameters(environ: Optional[Mapping[str, str]] = None,
                       profile: Optional[InstallProfile] = None) -> InstallParameters:
    """
    Resolve install parameters from the environment.

    Empty variables are treated as unset (shell ${VAR:-default} semantics).

    Args:
        environ: Environment mapping (default: os.environ)
        profile: Install profile providing defaults (default: packaged profile)

    Returns:
        Immutable InstallParameters

    Raises:
        ParameterError: If any value is invalid
    """
    if environ is None:
        environ = os.environ
    if profile is None:
        profile = load_profile()

    values = {}
    for key in ENV_KEYS:
        raw = environ.get(key, '').strip()
        values[key] = raw if raw else profile.defaults[key]
        if not _PRINTABLE.fullmatch(values[key]):
            raise ParameterError(f"{key} must be printable ASCII without control characters")

    for key in ('NTLM_USER', 'NTLM_GROUP'):
        if not _ACCOUNT_NAME.fullmatch(values[key]):
            raise ParameterError(f"{key} is not a valid account name: '{values[key]}'")

    home = Path(values['NTLM_HOME'])
    if not home.is_absolute():
        raise ParameterError(f"NTLM_HOME must be an absolute path, got '{home}'")
    if home == Path('/'):
        raise ParameterError("NTLM_HOME must not be the filesystem root")
    if not _HOME_PATH.fullmatch(values['NTLM_HOME']) or '..' in home.parts:
        raise ParameterError(
            f"NTLM_HOME may only contain letters, digits, '.', '_', '-' and '/' "
            f"and no '..' component, got '{home}'"
        )

    if not _HOSTNAME.fullmatch(values['PARENT_PROXY']):
        raise ParameterError(f"PARENT_PROXY is not a valid host name: '{values['PARENT_PROXY']}'")

    return InstallParameters(
        user=values['NTLM_USER'],
        group=values['NTLM_GROUP'],
        home=home,
        port=_parse_port('NTLM_PORT', values['NTLM_PORT']),
        parent_proxy=values['PARENT_PROXY'],
        parent_proxy_port=_parse_port('PARENT_PROXY_PORT', values['PARENT_PROXY_PORT']),
        nt_domain=values['NT_DOMAIN'],
        service_name=profile.service_name,
        config_file=profile.config_file,
    )
