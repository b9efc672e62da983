# Path and File Name : ntlmaps_installer/system/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Host subsystem interfaces package initialization

"""
Host subsystem interfaces: privilege, identity, systemd, firewalld.
"""

from .command_runner import CommandRunner
from .firewall import Firewalld, FirewallState
from .identity import HostIdentity
from .privilege import PrivilegeGuard
from .service_manager import SystemdServiceManager

__all__ = [
    'CommandRunner',
    'Firewalld',
    'FirewallState',
    'HostIdentity',
    'PrivilegeGuard',
    'SystemdServiceManager',
]
