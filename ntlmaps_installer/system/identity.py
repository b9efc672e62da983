# Path and File Name : ntlmaps_installer/system/identity.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Host identity subsystem interface - group/account lookup, creation and removal

"""
Host Identity: narrow interface to the host's users and groups.

Lookups use the pwd/grp databases; mutations use the shadow-utils commands
(groupadd, useradd, userdel, groupdel).
"""

import grp
import pwd
from pathlib import Path

from .command_runner import CommandRunner


class HostIdentity:
    """Queries and mutates host users and groups."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def group_exists(self, name: str) -> bool:
        try:
            grp.getgrnam(name)
            return True
        except KeyError:
            return False

    def user_exists(self, name: str) -> bool:
        try:
            pwd.getpwnam(name)
            return True
        except KeyError:
            return False

    def create_group(self, name: str) -> None:
        self.runner.run_checked(['groupadd', '--system', name])

    def create_user(self, name: str, group: str, home: Path, shell: str, comment: str) -> None:
        self.runner.run_checked([
            'useradd', '--system',
            '-g', group,
            '--home-dir', str(home),
            '--shell', shell,
            '--comment', comment,
            name,
        ])

    def delete_user(self, name: str) -> None:
        self.runner.run_checked(['userdel', name])

    def delete_group(self, name: str) -> None:
        self.runner.run_checked(['groupdel', name])
