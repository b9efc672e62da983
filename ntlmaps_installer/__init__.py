# Path and File Name : ntlmaps_installer/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: NTLMAPS installer package initialization

"""
NTLMAPS Installer: provisions the NTLM Authorization Proxy Server as a systemd service.
"""

from .installer import NtlmapsInstaller, main
from .parameters import InstallParameters, resolve_parameters

__all__ = ['NtlmapsInstaller', 'InstallParameters', 'main', 'resolve_parameters']

__version__ = "1.0.0"
