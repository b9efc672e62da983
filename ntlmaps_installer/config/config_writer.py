# Path and File Name : ntlmaps_installer/config/config_writer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Renders server.cfg for NTLMAPS with owner-only permissions

"""
Config Writer: renders the NTLMAPS server.cfg.

The document is sectioned ([GENERAL], [CLIENT_HEADER], [NTLM_AUTH], [DEBUG])
with KEY:value lines. It is designed to later hold a plaintext credential, so
it is owner read/write only (0600) on every run, including reruns over an
existing file. Rendered fresh every time - prior content is never merged.
"""

import logging
import os
from pathlib import Path

from ..accounts.account_provisioner import ServiceAccount
from ..errors import ResourceCreationError
from ..parameters import InstallParameters
from ..runtime.layout import ChownFn, lchown

logger = logging.getLogger(__name__)

RULE = "#" + "=" * 72

CLIENT_ACCEPT = (
    "image/gif, image/x-xbitmap, image/jpeg, image/pjpeg, application/vnd.ms-excel, "
    "application/msword, application/vnd.ms-powerpoint, */*"
)
CLIENT_USER_AGENT = "Mozilla/4.0 (compatible; MSIE 5.5; Windows 98)"


def render_config_text(params: InstallParameters) -> str:
    """Render server.cfg content for the given parameters."""
    return f"""{RULE}
[GENERAL]

LISTEN_PORT:{params.port}
PARENT_PROXY:{params.parent_proxy}
PARENT_PROXY_PORT:{params.parent_proxy_port}
PARENT_PROXY_TIMEOUT:15
ALLOW_EXTERNAL_CLIENTS:1
FRIENDLY_IPS:
URL_LOG:1
MAX_CONNECTION_BACKLOG:5

{RULE}
[CLIENT_HEADER]

Accept: {CLIENT_ACCEPT}
User-Agent: {CLIENT_USER_AGENT}

{RULE}
[NTLM_AUTH]

NT_HOSTNAME:
NT_DOMAIN:{params.nt_domain}
USER:
PASSWORD:

LM_PART:1
NT_PART:1
NTLM_FLAGS: 07820000
NTLM_TO_BASIC:1

{RULE}
[DEBUG]

DEBUG:1
BIN_DEBUG:0
SCR_DEBUG:0
AUTH_DEBUG:1
"""


class ConfigWriter:
    """Writes server.cfg."""

    def __init__(self, mode: int = 0o600, chown: ChownFn = lchown):
        self.mode = mode
        self._chown = chown

    def render_config(self, dest_path: Path, params: InstallParameters, owner: ServiceAccount) -> Path:
        """
        Write the configuration document, replacing any existing file.

        The document goes to a fresh temp file in the same directory (created
        exclusively, never through a symlink, restricted mode before any byte
        is written) and is renamed over dest_path. A symlink at dest_path is
        replaced, not followed. A failure leaves the previous file intact.

        Args:
            dest_path: server.cfg location
            params: Install parameters
            owner: Owning service account

        Returns:
            Path to written configuration file

        Raises:
            ResourceCreationError: If encoding, the write, chown or rename fails
        """
        logger.info("Creating configuration file")
        dest_path = Path(dest_path)

        try:
            data = render_config_text(params).encode('ascii')
        except UnicodeEncodeError as e:
            raise ResourceCreationError(f"Configuration for {dest_path} is not ASCII: {e}") from e

        tmp_path = dest_path.parent / f".{dest_path.name}.{os.getpid()}.tmp"
        try:
            _remove(tmp_path)
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL | os.O_NOFOLLOW, self.mode)
            try:
                os.fchmod(fd, self.mode)
                with os.fdopen(fd, 'wb') as f:
                    fd = None
                    f.write(data)
            finally:
                if fd is not None:
                    os.close(fd)
            self._chown(tmp_path, owner.name, owner.group)
            os.replace(tmp_path, dest_path)
        except (OSError, LookupError) as e:
            _remove(tmp_path)
            raise ResourceCreationError(f"Failed to write configuration file {dest_path}: {e}") from e

        logger.info("Created configuration file")
        return dest_path


def _remove(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
