# Path and File Name : ntlmaps_installer/runtime/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Runtime deployment package initialization

"""
Runtime Deployment Package: lays out /opt/ntlmaps and installs the NTLMAPS program files.
"""

from .layout import RuntimeLayout, chown_tree
from .runtime_deployer import RuntimeDeployer

__all__ = ['RuntimeDeployer', 'RuntimeLayout', 'chown_tree']
