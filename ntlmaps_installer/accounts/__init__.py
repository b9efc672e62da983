# Path and File Name : ntlmaps_installer/accounts/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Service account package initialization

"""
Service Account Package: provisions the NTLMAPS system group and account.
"""

from .account_provisioner import AccountProvisioner, ServiceAccount

__all__ = ['AccountProvisioner', 'ServiceAccount']
