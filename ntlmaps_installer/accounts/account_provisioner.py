# Path and File Name : ntlmaps_installer/accounts/account_provisioner.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Idempotently ensures the NTLMAPS system group and service account exist

"""
Account Provisioner: creates the service group and account if they are missing.

Idempotent: an existing group or account is logged and left untouched.
Creates at most one group and one account per invocation.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from ..errors import CommandError, ResourceCreationError
from ..system.identity import HostIdentity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceAccount:
    """Restricted, non-interactive identity the proxy runs as."""
    name: str
    group: str
    home: Path
    shell: str
    group_created: bool = False
    user_created: bool = False


class AccountProvisioner:
    """Ensures the service group and account exist."""

    def __init__(self, identity: HostIdentity, shell: str = "/bin/false",
                 comment: str = "NTLM Proxy Service"):
        self.identity = identity
        self.shell = shell
        self.comment = comment

    def ensure_account(self, name: str, group: str, home: Path) -> ServiceAccount:
        """
        Ensure a system group and a system account bound to it exist.

        Args:
            name: Account name
            group: Group name
            home: Home directory (the install root)

        Returns:
            ServiceAccount describing the (possibly pre-existing) account

        Raises:
            ResourceCreationError: If groupadd or useradd fails (no retries)
        """
        logger.info(f"Creating user and group: {name}")

        group_created = False
        if not self.identity.group_exists(group):
            try:
                self.identity.create_group(group)
            except CommandError as e:
                raise ResourceCreationError(f"Failed to create group {group}: {e}") from e
            group_created = True
            logger.info(f"Created group: {group}")
        else:
            logger.warning(f"Group {group} already exists")

        user_created = False
        if not self.identity.user_exists(name):
            try:
                self.identity.create_user(name, group, home, self.shell, self.comment)
            except CommandError as e:
                raise ResourceCreationError(f"Failed to create user {name}: {e}") from e
            user_created = True
            logger.info(f"Created user: {name}")
        else:
            logger.warning(f"User {name} already exists")

        return ServiceAccount(
            name=name,
            group=group,
            home=Path(home),
            shell=self.shell,
            group_created=group_created,
            user_created=user_created,
        )
