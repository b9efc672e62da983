# Path and File Name : ntlmaps_installer/uninstaller.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Idempotent NTLMAPS teardown with operator-confirmed account and directory purge

"""
Uninstaller

Teardown order:
  stop (if active) -> disable (if enabled) -> remove unit -> daemon-reload
  -> remove logrotate policy
  -> remove firewall rule (if firewalld active, unless the record says none was added)
  -> remove install state
  -> [confirmed only] remove account, group and install tree

Every step treats an already-absent resource as success, so teardown is safe
on a host where the service was never installed. The final purge is the only
step that needs explicit confirmation: it is irreversible and deletes the
credential-bearing server.cfg.

The install state record, when present, supplies the account, install root
and port, and the unit and policy hashes used to flag local edits.
"""

import logging
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .errors import CommandError, InstallStateError, ResourceCreationError
from .install_state import InstallStateStore, parameters_from_state
from .parameters import InstallParameters
from .services.firewall_registrar import FirewallRegistrar
from .services.logrotate_writer import LogrotateWriter
from .services.systemd_writer import SystemdWriter, file_sha256
from .system.identity import HostIdentity
from .system.service_manager import SystemdServiceManager

logger = logging.getLogger(__name__)

ConfirmFn = Callable[[str], bool]


def prompt_confirmation(question: str) -> bool:
    """Ask on the terminal; anything but y/yes (or no terminal at all) means no."""
    if not sys.stdin.isatty():
        logger.warning("No interactive terminal, keeping user and directory")
        return False
    try:
        reply = input(question)
    except EOFError:
        return False
    return reply.strip().lower() in ('y', 'yes')


@dataclass
class UninstallReport:
    """What teardown actually changed."""
    stopped: bool = False
    disabled: bool = False
    unit_removed: bool = False
    rotation_removed: bool = False
    firewall_rule_removed: bool = False
    state_removed: bool = False
    purge_confirmed: bool = False
    purged: List[str] = field(default_factory=list)


class Uninstaller:
    """Reverses service registration and, if confirmed, the account and install tree."""

    def __init__(self,
                 service_manager: SystemdServiceManager,
                 systemd_writer: SystemdWriter,
                 logrotate_writer: LogrotateWriter,
                 firewall_registrar: FirewallRegistrar,
                 identity: HostIdentity,
                 state_store: InstallStateStore,
                 confirm: ConfirmFn = prompt_confirmation):
        self.service_manager = service_manager
        self.systemd_writer = systemd_writer
        self.logrotate_writer = logrotate_writer
        self.firewall_registrar = firewall_registrar
        self.identity = identity
        self.state_store = state_store
        self.confirm = confirm

    def load_recorded_state(self) -> Optional[Dict[str, Any]]:
        """The last install's record, or None if absent or unreadable."""
        try:
            return self.state_store.load_state()
        except InstallStateError as e:
            logger.warning(f"Ignoring unreadable install state: {e}")
            return None

    def resolve_parameters(self, params: InstallParameters,
                           state: Optional[Dict[str, Any]]) -> InstallParameters:
        """Prefer what the last install recorded over the current environment."""
        if state is None:
            return params
        recorded = parameters_from_state(state, params)
        if recorded != params:
            logger.info(
                f"Using recorded install: user={recorded.user} home={recorded.home} port={recorded.port}"
            )
        return recorded

    def uninstall(self, params: InstallParameters) -> UninstallReport:
        """
        Run the teardown state machine.

        Raises:
            ResourceCreationError: If a present resource cannot be removed
        """
        logger.info("Uninstalling NTLMAPS service")
        state = self.load_recorded_state()
        params = self.resolve_parameters(params, state)
        unit = params.unit_name
        report = UninstallReport()

        try:
            if self.service_manager.is_active(unit):
                self.service_manager.stop(unit)
                report.stopped = True
            if self.service_manager.is_enabled(unit):
                self.service_manager.disable(unit)
                report.disabled = True
        except CommandError as e:
            raise ResourceCreationError(f"Failed to stop/disable {unit}: {e}") from e

        if state is not None:
            _warn_if_modified(self.systemd_writer.unit_path(params), state["unit_sha256"])
            _warn_if_modified(self.logrotate_writer.policy_path(params.service_name),
                              state["logrotate_sha256"])

        report.unit_removed = self.systemd_writer.remove_unit(params)
        try:
            self.service_manager.daemon_reload()
        except CommandError as e:
            raise ResourceCreationError(f"systemctl daemon-reload failed: {e}") from e

        report.rotation_removed = self.logrotate_writer.remove_rotation(params.service_name)
        if state is not None and not state["firewall_rule_added"]:
            logger.info("No firewall rule was added at install, skipping firewall cleanup")
        else:
            report.firewall_rule_removed = self.firewall_registrar.close_port(params.port)
        report.state_removed = self.state_store.remove_state()

        question = f"Remove user {params.user} and directory {params.home}? [y/N]: "
        if self.confirm(question):
            report.purge_confirmed = True
            report.purged = self._purge(params)
            logger.info("Removed user and directory")

        logger.info("NTLMAPS service uninstalled")
        return report

    def _purge(self, params: InstallParameters) -> List[str]:
        purged: List[str] = []

        # unit is already gone; a stray process must not keep the account busy
        self.service_manager.try_stop(params.unit_name)

        try:
            if self.identity.user_exists(params.user):
                self.identity.delete_user(params.user)
                purged.append(f"user:{params.user}")
            # userdel may already have removed a same-named primary group
            if self.identity.group_exists(params.group):
                self.identity.delete_group(params.group)
                purged.append(f"group:{params.group}")
        except CommandError as e:
            raise ResourceCreationError(f"Failed to remove account {params.user}: {e}") from e

        if params.home.exists():
            try:
                shutil.rmtree(params.home)
            except OSError as e:
                raise ResourceCreationError(f"Failed to remove {params.home}: {e}") from e
            purged.append(f"dir:{params.home}")

        return purged


def _warn_if_modified(path: Path, recorded_sha256: str) -> None:
    if path.is_file() and file_sha256(path) != recorded_sha256:
        logger.warning(f"{path} was modified after installation; removing it anyway")
