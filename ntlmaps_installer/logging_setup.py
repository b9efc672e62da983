# Path and File Name : ntlmaps_installer/logging_setup.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Configures installer logging to console and an optional log file

"""
Logging setup for the installer CLI.

Console output always; set NTLMAPS_INSTALL_LOG to also append to a file.
"""

import logging
import os
import sys
from pathlib import Path
from typing import List, Mapping, Optional

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logging(level: int = logging.INFO,
                  environ: Optional[Mapping[str, str]] = None) -> logging.Logger:
    """Configure root logging once; returns the package logger."""
    if environ is None:
        environ = os.environ

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    log_file = environ.get('NTLMAPS_INSTALL_LOG', '').strip()
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    return logging.getLogger('ntlmaps_installer')
