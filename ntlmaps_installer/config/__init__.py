# Path and File Name : ntlmaps_installer/config/__init__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Configuration rendering package initialization

from .config_writer import ConfigWriter, render_config_text

__all__ = ['ConfigWriter', 'render_config_text']
