# Path and File Name : ntlmaps_installer/services/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Service registration package initialization

"""
Service Registration Package: systemd unit, logrotate policy, firewall rule, activation.
"""

from .activator import ServiceActivator
from .firewall_registrar import FirewallRegistrar
from .logrotate_writer import LogrotateWriter
from .systemd_writer import SystemdWriter, file_sha256

__all__ = [
    'FirewallRegistrar',
    'LogrotateWriter',
    'ServiceActivator',
    'SystemdWriter',
    'file_sha256',
]
